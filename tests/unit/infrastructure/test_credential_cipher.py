"""Unit tests для CredentialCipher та CredentialResolver."""

import pytest

from copytrade.domain.copying.entities import Trader
from copytrade.domain.copying.exceptions import CredentialsNotConfiguredError
from copytrade.domain.copying.value_objects import TraderRole
from copytrade.infrastructure.encryption import CredentialCipher, CredentialResolver


def make_trader(user_id="snap-1", secret="plain-secret") -> Trader:
    return Trader(
        display_name="Follower",
        role=TraderRole.FOLLOWER,
        brokerage_user_id=user_id,
        brokerage_user_secret=secret,
        id=5,
    )


class TestCredentialCipher:
    def test_encrypt_decrypt(self):
        cipher = CredentialCipher("my-encryption-key")

        stored = cipher.encrypt("user-secret")

        assert stored != "user-secret"
        assert CredentialCipher.looks_encrypted(stored) is True
        assert cipher.decrypt(stored) == "user-secret"

    def test_empty_key_rejected(self):
        with pytest.raises(ValueError):
            CredentialCipher("")


class TestCredentialResolver:
    def test_decrypts_encrypted_secret(self):
        # Arrange
        cipher = CredentialCipher("key-1")
        trader = make_trader(secret=cipher.encrypt("real-secret"))

        # Act
        credentials = CredentialResolver(cipher).resolve(trader)

        # Assert
        assert credentials.user_id == "snap-1"
        assert credentials.user_secret == "real-secret"

    def test_accepts_legacy_plaintext(self):
        credentials = CredentialResolver(CredentialCipher("key-1")).resolve(make_trader())

        assert credentials.user_secret == "plain-secret"

    def test_missing_credentials(self):
        with pytest.raises(CredentialsNotConfiguredError):
            CredentialResolver(None).resolve(make_trader(secret=None))

    def test_wrong_key_is_configuration_error(self):
        trader = make_trader(secret=CredentialCipher("key-1").encrypt("real-secret"))

        with pytest.raises(CredentialsNotConfiguredError):
            CredentialResolver(CredentialCipher("other-key")).resolve(trader)

    def test_encrypted_secret_without_key(self):
        trader = make_trader(secret=CredentialCipher("key-1").encrypt("real-secret"))

        with pytest.raises(CredentialsNotConfiguredError):
            CredentialResolver(None).resolve(trader)

    def test_credentials_repr_hides_secret(self):
        credentials = CredentialResolver(None).resolve(make_trader())

        assert "plain-secret" not in repr(credentials)
