"""
VNml Security - Password-based encryption hooks for secure settings.

Security features:
  - AES-256-GCM encryption of each secure setting value
  - Setting name bound as AAD (a ciphertext cannot be moved to another setting)
  - Fresh salt and nonce per value, key derivation via PBKDF2-HMAC-SHA256
  - Text-safe storage: salt (16) + nonce (12) + ciphertext + tag (16), base64
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import os
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

if TYPE_CHECKING:
    from vnml.settings import XmlSettings

# AAD prefix binding ciphertexts to VNml settings
_AES_AAD = b"VNML-SET/1.0:"

PASSWORD_ENV = "VNML_SETTINGS_PASSWORD"

DEFAULT_ITERATIONS = 600_000  # OWASP recommended minimum

_SALT_SIZE = 16
_NONCE_SIZE = 12
_TAG_SIZE = 16


class SettingsCipher:
    """
    Encrypts and decrypts setting values with a password.

    Usage:
        cipher = SettingsCipher("hunter2")
        cipher.attach(settings)   # wires the XmlSettings encryption hooks
        settings.save("app.xml")
    """

    def __init__(self, password: str, iterations: int = DEFAULT_ITERATIONS) -> None:
        if not password:
            raise ValueError("Password cannot be empty")
        self._password = password.encode("utf-8")
        self.iterations = iterations

    @classmethod
    def from_env(cls, iterations: int = DEFAULT_ITERATIONS) -> SettingsCipher | None:
        """Cipher for the password in ``VNML_SETTINGS_PASSWORD``, or None."""
        password = os.environ.get(PASSWORD_ENV, "")
        return cls(password, iterations) if password else None

    def _derive_key(self, salt: bytes) -> bytes:
        return hashlib.pbkdf2_hmac(
            "sha256",
            self._password,
            salt,
            iterations=self.iterations,
            dklen=32,
        )

    def encrypt(self, setting_name: str, value: str) -> str:
        salt = os.urandom(_SALT_SIZE)
        nonce = os.urandom(_NONCE_SIZE)
        aesgcm = AESGCM(self._derive_key(salt))
        ciphertext = aesgcm.encrypt(nonce, value.encode("utf-8"), _AES_AAD + setting_name.encode("utf-8"))
        return base64.b64encode(salt + nonce + ciphertext).decode("ascii")

    def decrypt(self, setting_name: str, value: str) -> str:
        """Reverse ``encrypt``.

        Raises ValueError for malformed input and
        ``cryptography.exceptions.InvalidTag`` for a wrong password or a
        tampered value.
        """
        try:
            raw = base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Encrypted value of {setting_name!r} is not base64") from e
        if len(raw) < _SALT_SIZE + _NONCE_SIZE + _TAG_SIZE:
            raise ValueError(
                f"Encrypted value of {setting_name!r} too short: {len(raw)} bytes "
                f"(minimum {_SALT_SIZE + _NONCE_SIZE + _TAG_SIZE})"
            )
        salt = raw[:_SALT_SIZE]
        nonce = raw[_SALT_SIZE:_SALT_SIZE + _NONCE_SIZE]
        ciphertext = raw[_SALT_SIZE + _NONCE_SIZE:]
        aesgcm = AESGCM(self._derive_key(salt))
        plaintext = aesgcm.decrypt(nonce, ciphertext, _AES_AAD + setting_name.encode("utf-8"))
        return plaintext.decode("utf-8")

    def attach(self, settings: XmlSettings) -> None:
        """Use this cipher for the secure settings of ``settings``."""
        settings.request_encryption = self.encrypt
        settings.request_decryption = self.decrypt
