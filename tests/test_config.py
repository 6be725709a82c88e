from __future__ import annotations

import base64
from pathlib import Path

import pytest

from utils.config import ResponderConfig, load_config

CONFIG_VARS = (
    "OWNER_ADDRESS",
    "AUTOREPLY_LABEL",
    "MAX_THREADS_PER_PASS",
    "MIN_DELAY_SECONDS",
    "MAX_DELAY_SECONDS",
    "REPLY_SUBJECT",
    "REPLY_BODY",
    "GOOGLE_CLIENT_SECRETS",
    "GOOGLE_CLIENT_SECRETS_JSON",
    "GOOGLE_CLIENT_SECRETS_B64",
    "GOOGLE_TOKEN_PATH",
    "GOOGLE_TOKEN_JSON",
    "GOOGLE_TOKEN_B64",
    "GMAIL_USER_ID",
    "INTERACTIVE_AUTH",
    "LOG_DIR",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)


def _env_file(tmp_path: Path, **values: str) -> Path:
    env_path = tmp_path / ".env"
    env_path.write_text("".join(f"{key}={value}\n" for key, value in values.items()), encoding="utf-8")
    return env_path


def test_defaults_from_env_file(tmp_path: Path) -> None:
    env_path = _env_file(
        tmp_path,
        OWNER_ADDRESS="owner@x.com",
        GOOGLE_TOKEN_PATH=str(tmp_path / "token.json"),
        GOOGLE_CLIENT_SECRETS=str(tmp_path / "credentials.json"),
        LOG_DIR=str(tmp_path / "logs"),
    )

    config = load_config(env_path)

    assert config.responder.owner_address == "owner@x.com"
    assert config.responder.label_name == "AutoReplied"
    assert config.responder.max_threads_per_pass == 16
    assert (config.responder.min_delay_seconds, config.responder.max_delay_seconds) == (45, 120)
    assert config.responder.reply_body == "Hello, will get back soon."
    assert config.account.user_id == "me"
    assert config.account.interactive_auth is True
    assert config.account.token_file == tmp_path / "token.json"


def test_overrides_and_secret_files(tmp_path: Path) -> None:
    token_path = tmp_path / "secrets" / "token.json"
    env_path = _env_file(
        tmp_path,
        OWNER_ADDRESS="owner@x.com",
        AUTOREPLY_LABEL="Acknowledged",
        MAX_THREADS_PER_PASS="5",
        MIN_DELAY_SECONDS="10",
        MAX_DELAY_SECONDS="20",
        INTERACTIVE_AUTH="false",
        GOOGLE_TOKEN_PATH=str(token_path),
        GOOGLE_CLIENT_SECRETS=str(tmp_path / "credentials.json"),
        GOOGLE_TOKEN_B64=base64.b64encode(b'{"refresh_token": "r"}').decode("ascii"),
    )

    config = load_config(env_path)

    assert config.responder.label_name == "Acknowledged"
    assert config.responder.max_threads_per_pass == 5
    assert (config.responder.min_delay_seconds, config.responder.max_delay_seconds) == (10, 20)
    assert config.account.interactive_auth is False
    assert token_path.read_bytes() == b'{"refresh_token": "r"}'


def test_missing_owner_address_is_rejected(tmp_path: Path) -> None:
    env_path = _env_file(tmp_path, LOG_DIR=str(tmp_path / "logs"))

    with pytest.raises(ValueError, match="OWNER_ADDRESS"):
        load_config(env_path)


def test_non_integer_setting_is_rejected(tmp_path: Path) -> None:
    env_path = _env_file(tmp_path, OWNER_ADDRESS="owner@x.com", MAX_THREADS_PER_PASS="many")

    with pytest.raises(ValueError, match="MAX_THREADS_PER_PASS"):
        load_config(env_path)


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_threads_per_pass": 0},
        {"min_delay_seconds": 130},
        {"min_delay_seconds": -1},
        {"label_name": ""},
    ],
)
def test_responder_config_validation(overrides) -> None:
    with pytest.raises(ValueError):
        ResponderConfig(owner_address="owner@x.com", **overrides)
