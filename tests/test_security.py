"""Tests for credential encryption."""

from __future__ import annotations

import base64

import pytest
from pydantic import SecretStr

from promanage.errors import EncryptionError
from promanage.security import NONCE_SIZE, CredentialCipher


class TestCredentialCipher:
    """Tests for AES-GCM credential storage."""

    def test_encrypt_decrypt(self):
        cipher = CredentialCipher(SecretStr("s3cret"))

        token = cipher.encrypt("ghp_abc")

        assert token != "ghp_abc"
        assert cipher.decrypt(token) == "ghp_abc"

    def test_nonce_varies(self):
        cipher = CredentialCipher("s3cret")

        assert cipher.encrypt("same") != cipher.encrypt("same")

    def test_wrong_secret(self):
        token = CredentialCipher("one").encrypt("value")

        with pytest.raises(EncryptionError):
            CredentialCipher("two").decrypt(token)

    def test_tampered(self):
        cipher = CredentialCipher("s3cret")
        blob = bytearray(base64.b64decode(cipher.encrypt("value")))
        blob[-1] ^= 0x01

        with pytest.raises(EncryptionError):
            cipher.decrypt(base64.b64encode(bytes(blob)).decode("ascii"))

    @pytest.mark.parametrize("token", ["not base64!", base64.b64encode(b"x" * NONCE_SIZE).decode()])
    def test_malformed(self, token):
        with pytest.raises(EncryptionError):
            CredentialCipher("s3cret").decrypt(token)

    def test_empty_secret(self):
        with pytest.raises(EncryptionError):
            CredentialCipher(SecretStr(""))

    def test_optional(self):
        cipher = CredentialCipher("s3cret")

        assert cipher.decrypt_optional(None) is None
        assert cipher.decrypt_optional("") is None
        assert cipher.decrypt_optional(cipher.encrypt("x")) == "x"
