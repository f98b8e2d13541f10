"""Encryption of stored credentials.

Provider passwords and tokens are stored as AES-256-GCM envelopes keyed by a
SHA-256 digest of the configured application secret.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from pydantic import SecretStr

from promanage.errors import EncryptionError

NONCE_SIZE = 12  # 96-bit nonce recommended for GCM


class CredentialCipher:
    """Encrypts and decrypts credential strings for storage at rest."""

    def __init__(self, secret: SecretStr | str) -> None:
        raw = secret.get_secret_value() if isinstance(secret, SecretStr) else secret
        if not raw:
            raise EncryptionError("Encryption secret must not be empty.")
        self._aes = AESGCM(hashlib.sha256(raw.encode("utf-8")).digest())

    def encrypt(self, plain: str) -> str:
        """Encrypt text, returning base64(nonce || ciphertext || tag)."""
        nonce = secrets.token_bytes(NONCE_SIZE)
        ciphertext = self._aes.encrypt(nonce, plain.encode("utf-8"), None)
        return base64.b64encode(nonce + ciphertext).decode("ascii")

    def decrypt(self, token: str) -> str:
        """Decrypt a value produced by :meth:`encrypt`."""
        try:
            blob = base64.b64decode(token, validate=True)
        except (binascii.Error, ValueError) as e:
            raise EncryptionError(f"Invalid encrypted value: {e}") from e
        if len(blob) <= NONCE_SIZE:
            raise EncryptionError("Encrypted value is truncated.")
        try:
            plain = self._aes.decrypt(blob[:NONCE_SIZE], blob[NONCE_SIZE:], None)
        except InvalidTag as e:
            raise EncryptionError("Decryption failed: authentication tag mismatch") from e
        return plain.decode("utf-8")

    def decrypt_optional(self, token: str | None) -> str | None:
        return self.decrypt(token) if token else None
