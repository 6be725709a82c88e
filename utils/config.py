from __future__ import annotations

import base64
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_LABEL_NAME = "AutoReplied"
DEFAULT_REPLY_SUBJECT = "Your Subject"
DEFAULT_REPLY_BODY = "Hello, will get back soon."


@dataclass(slots=True)
class AccountConfig:
    credentials_file: Path
    token_file: Path
    user_id: str
    interactive_auth: bool = True


@dataclass(slots=True)
class ResponderConfig:
    """Settings that drive a scan-and-respond pass and the pass schedule."""

    owner_address: str
    label_name: str = DEFAULT_LABEL_NAME
    max_threads_per_pass: int = 16
    min_delay_seconds: int = 45
    max_delay_seconds: int = 120
    reply_subject: str = DEFAULT_REPLY_SUBJECT
    reply_body: str = DEFAULT_REPLY_BODY

    def __post_init__(self) -> None:
        if not self.owner_address:
            raise ValueError("An owner address is required (set OWNER_ADDRESS)")
        if not self.label_name:
            raise ValueError("The auto-reply label name must not be empty")
        if self.max_threads_per_pass < 1:
            raise ValueError(f"max_threads_per_pass must be at least 1, got {self.max_threads_per_pass}")
        if self.min_delay_seconds < 0 or self.min_delay_seconds > self.max_delay_seconds:
            raise ValueError(
                f"Invalid delay window [{self.min_delay_seconds}, {self.max_delay_seconds}]"
            )


@dataclass(slots=True)
class AppConfig:
    responder: ResponderConfig
    account: AccountConfig
    log_dir: Path
    log_level: str


def _resolve_path(value: str | None, fallback: str) -> Path:
    candidate = Path(value or fallback)
    if not candidate.is_absolute():
        candidate = PROJECT_ROOT / candidate
    return candidate


def _maybe_write_secret_file(target: Path, inline_value: str | None, b64_value: str | None) -> None:
    if not inline_value and not b64_value:
        return
    target.parent.mkdir(parents=True, exist_ok=True)
    if inline_value:
        target.write_text(inline_value, encoding="utf-8")
        return
    try:
        decoded = base64.b64decode(b64_value or "", validate=True)
    except ValueError as exc:
        raise ValueError("Failed to decode base64 secret payload") from exc
    target.write_bytes(decoded)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_config(env_file: str | os.PathLike[str] | None = None) -> AppConfig:
    """Load configuration values from a .env file and environment variables."""

    if env_file:
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(override=False)

    credentials_file = _resolve_path(os.getenv("GOOGLE_CLIENT_SECRETS"), "credentials.json")
    token_file = _resolve_path(os.getenv("GOOGLE_TOKEN_PATH"), "token.json")
    log_dir = _resolve_path(os.getenv("LOG_DIR"), "logs")

    _maybe_write_secret_file(
        credentials_file,
        os.getenv("GOOGLE_CLIENT_SECRETS_JSON"),
        os.getenv("GOOGLE_CLIENT_SECRETS_B64"),
    )
    _maybe_write_secret_file(
        token_file,
        os.getenv("GOOGLE_TOKEN_JSON"),
        os.getenv("GOOGLE_TOKEN_B64"),
    )

    responder = ResponderConfig(
        owner_address=os.getenv("OWNER_ADDRESS", "").strip(),
        label_name=os.getenv("AUTOREPLY_LABEL", DEFAULT_LABEL_NAME),
        max_threads_per_pass=_int_env("MAX_THREADS_PER_PASS", 16),
        min_delay_seconds=_int_env("MIN_DELAY_SECONDS", 45),
        max_delay_seconds=_int_env("MAX_DELAY_SECONDS", 120),
        reply_subject=os.getenv("REPLY_SUBJECT", DEFAULT_REPLY_SUBJECT),
        reply_body=os.getenv("REPLY_BODY", DEFAULT_REPLY_BODY),
    )

    account = AccountConfig(
        credentials_file=credentials_file,
        token_file=token_file,
        user_id=os.getenv("GMAIL_USER_ID", "me"),
        interactive_auth=_bool_env("INTERACTIVE_AUTH", True),
    )

    return AppConfig(
        responder=responder,
        account=account,
        log_dir=log_dir,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
