from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from .base import CredentialProvider

LOGGER = logging.getLogger(__name__)


class InstalledAppFlowProvider(CredentialProvider):
    """Interactive browser consent using the OAuth client secrets file."""

    def __init__(self, client_secrets_file: Path, port: int = 0):
        self._client_secrets_file = client_secrets_file
        self._port = port

    def acquire(self, scopes: Iterable[str]) -> Credentials | None:
        if not self._client_secrets_file.exists():
            raise FileNotFoundError(f"Missing OAuth client secrets file: {self._client_secrets_file}")
        LOGGER.info("Initiating OAuth flow using %s", self._client_secrets_file)
        flow = InstalledAppFlow.from_client_secrets_file(str(self._client_secrets_file), scopes=list(scopes))
        return flow.run_local_server(port=self._port)
