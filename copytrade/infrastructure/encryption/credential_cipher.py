"""Credential encryption for stored brokerage user secrets.

Fernet symmetric encryption; ключ виводиться з ``encryption_key`` через
SHA-256, тож підходить будь-який рядок-секрет.
"""

import base64
import hashlib
import logging

from cryptography.fernet import Fernet, InvalidToken

from copytrade.domain.brokerage.value_objects import BrokerageCredentials
from copytrade.domain.copying.entities import Trader
from copytrade.domain.copying.exceptions import CredentialsNotConfiguredError

logger = logging.getLogger(__name__)

_FERNET_PREFIX = "gAAAA"


class CredentialCipher:
    """Encrypts and decrypts brokerage user secrets.

    Example:
        >>> cipher = CredentialCipher("my-encryption-key")
        >>> stored = cipher.encrypt("user-secret")
        >>> cipher.decrypt(stored)
        'user-secret'
    """

    def __init__(self, secret_key: str) -> None:
        if not secret_key:
            raise ValueError("Encryption key is required")
        derived_key = hashlib.sha256(secret_key.encode()).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(derived_key))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a stored secret.

        Raises:
            cryptography.fernet.InvalidToken: Wrong key or corrupted value.
        """
        return self._fernet.decrypt(ciphertext.encode()).decode()

    @staticmethod
    def looks_encrypted(value: str) -> bool:
        """Fernet tokens always start with the version byte (``gAAAA`` in base64)."""
        return value.startswith(_FERNET_PREFIX)


class CredentialResolver:
    """Turns a Trader row into BrokerageCredentials.

    Legacy рядки, збережені до шифрування, приймаються як plaintext.
    """

    def __init__(self, cipher: CredentialCipher | None) -> None:
        self._cipher = cipher

    def resolve(self, trader: Trader) -> BrokerageCredentials:
        """Resolve credentials.

        Raises:
            CredentialsNotConfiguredError: Немає credentials або їх не
                вдалося розшифрувати.
        """
        if not trader.has_brokerage_credentials:
            raise CredentialsNotConfiguredError(
                "Trader has no brokerage credentials", trader_id=trader.id
            )

        stored = trader.brokerage_user_secret or ""
        secret = stored
        if CredentialCipher.looks_encrypted(stored):
            if self._cipher is None:
                raise CredentialsNotConfiguredError(
                    "Encrypted secret but no encryption key configured", trader_id=trader.id
                )
            try:
                secret = self._cipher.decrypt(stored)
            except InvalidToken as e:
                logger.error("credentials.decrypt_failed", extra={"trader_id": trader.id})
                raise CredentialsNotConfiguredError(
                    "Failed to decrypt brokerage secret", trader_id=trader.id
                ) from e
        else:
            logger.warning("credentials.plaintext_secret", extra={"trader_id": trader.id})

        return BrokerageCredentials(user_id=trader.brokerage_user_id or "", user_secret=secret)
