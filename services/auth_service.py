from __future__ import annotations

import logging
from typing import Iterable, Sequence

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from services.credentials import CredentialProvider, InstalledAppFlowProvider, TokenFileProvider
from utils.config import AccountConfig

LOGGER = logging.getLogger(__name__)
SCOPES: Iterable[str] = ("https://www.googleapis.com/auth/gmail.modify",)


class AuthorizationError(RuntimeError):
    """No credential source produced usable Gmail credentials."""


class AuthService:
    """Handle the OAuth2 credential lifecycle for the Gmail account.

    Providers are consulted in order; the first one yielding usable
    credentials wins. Expired credentials carrying a refresh token are
    refreshed in place. Whatever is obtained is handed to ``store`` so the
    next run can reuse it.
    """

    def __init__(
        self,
        providers: Sequence[CredentialProvider],
        store: CredentialProvider,
        scopes: Iterable[str] = SCOPES,
    ):
        self._providers = list(providers)
        self._store = store
        self._scopes = tuple(scopes)

    @classmethod
    def for_account(cls, account: AccountConfig) -> "AuthService":
        cache = TokenFileProvider(account.token_file)
        providers: list[CredentialProvider] = [cache]
        if account.interactive_auth:
            providers.append(InstalledAppFlowProvider(account.credentials_file))
        return cls(providers, store=cache)

    def authenticate(self) -> Credentials:
        for provider in self._providers:
            creds = provider.acquire(self._scopes)
            if creds is None:
                continue

            if not creds.valid and creds.refresh_token:
                LOGGER.info("Refreshing expired Gmail token")
                creds.refresh(Request())
                self._store.persist(creds)
                return creds

            if creds.valid:
                if provider is not self._store:
                    self._store.persist(creds)
                return creds

            LOGGER.warning("%s returned unusable credentials", type(provider).__name__)

        raise AuthorizationError(
            "No valid Gmail credentials available; run the 'authorize' command interactively"
        )
