"""Encryption infrastructure for brokerage user secrets."""

from .credential_cipher import CredentialCipher, CredentialResolver

__all__ = ["CredentialCipher", "CredentialResolver"]
