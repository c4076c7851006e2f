"""
Field-level symmetric encryption.

Each sensitive attribute is encrypted on its own with AES-256-CBC under a
static server key and a fresh random 16-byte IV, so the same plaintext never
produces the same ciphertext twice. Ciphertext is therefore useless as a
lookup key.
"""

import binascii
import os
import re
from dataclasses import dataclass

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from app.utils.exceptions import ConfigurationError, DecryptionError

IV_LENGTH = 16
KEY_HEX_LENGTH = 64
_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")


@dataclass(frozen=True)
class EncryptedValue:
    """Hex-encoded IV and ciphertext for a single field."""

    iv: str
    content: str


class FieldCipher:
    """AES-256-CBC cipher bound to one configured key."""

    def __init__(self, key_hex: str):
        if not key_hex or len(key_hex) != KEY_HEX_LENGTH or not _HEX_RE.match(key_hex):
            raise ConfigurationError(
                "ENCRYPTION_KEY must be exactly 64 hex characters (32 bytes)"
            )
        self._key = bytes.fromhex(key_hex)

    def encrypt(self, plaintext: str) -> EncryptedValue:
        iv = os.urandom(IV_LENGTH)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return EncryptedValue(iv=iv.hex(), content=ciphertext.hex())

    def decrypt(self, value: EncryptedValue) -> str:
        """
        Decrypt a value produced by ``encrypt``.

        Raises:
            DecryptionError: if the hex is malformed, the IV has the wrong
                length, or the padding/UTF-8 check fails (wrong key,
                corrupted ciphertext or tampered IV).
        """
        try:
            iv = bytes.fromhex(value.iv)
            ciphertext = bytes.fromhex(value.content)
        except (ValueError, TypeError, binascii.Error) as exc:
            raise DecryptionError("Stored value is not valid hex") from exc

        if len(iv) != IV_LENGTH:
            raise DecryptionError("Stored IV has the wrong length")
        if not ciphertext or len(ciphertext) % IV_LENGTH:
            raise DecryptionError("Stored ciphertext has the wrong length")

        decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()

        try:
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            raw = unpadder.update(padded) + unpadder.finalize()
            return raw.decode("utf-8")
        except (ValueError, UnicodeDecodeError) as exc:
            raise DecryptionError("Bad padding or encoding") from exc
