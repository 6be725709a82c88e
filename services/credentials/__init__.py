"""Credential sources consulted by the auth service."""

from .base import CredentialProvider
from .installed_app import InstalledAppFlowProvider
from .token_file import TokenFileProvider

__all__ = [
    "CredentialProvider",
    "InstalledAppFlowProvider",
    "TokenFileProvider",
]
