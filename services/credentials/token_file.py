from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from google.oauth2.credentials import Credentials

from .base import CredentialProvider

LOGGER = logging.getLogger(__name__)


class TokenFileProvider(CredentialProvider):
    """Cached authorized-user token stored as JSON on disk."""

    def __init__(self, token_file: Path):
        self._token_file = token_file

    @property
    def token_file(self) -> Path:
        return self._token_file

    def acquire(self, scopes: Iterable[str]) -> Credentials | None:
        if not self._token_file.exists():
            LOGGER.debug("No cached token at %s", self._token_file)
            return None
        LOGGER.debug("Loading cached credential from %s", self._token_file)
        data = json.loads(self._token_file.read_text(encoding="utf-8"))
        return Credentials.from_authorized_user_info(data, list(scopes))

    def persist(self, creds: Credentials) -> None:
        LOGGER.debug("Persisting OAuth tokens to %s", self._token_file)
        self._token_file.parent.mkdir(parents=True, exist_ok=True)
        self._token_file.write_text(creds.to_json(), encoding="utf-8")
