from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from google.oauth2.credentials import Credentials


class CredentialProvider(ABC):
    """Source of OAuth2 credentials for the Gmail account."""

    @abstractmethod
    def acquire(self, scopes: Iterable[str]) -> Credentials | None:
        """Return credentials for ``scopes``, or ``None`` when this source has none."""
        raise NotImplementedError

    def persist(self, creds: Credentials) -> None:  # noqa: B027
        """Store ``creds`` for later runs. Sources without storage ignore this."""
