"""
Tests for field-level encryption.
"""

import pytest

from app.services.field_cipher import EncryptedValue, FieldCipher
from app.utils.exceptions import ConfigurationError, DecryptionError


def test_encrypt_decrypt_roundtrip(cipher: FieldCipher):
    value = cipher.encrypt("4111111111111111")

    assert len(value.iv) == 32
    assert len(value.content) % 32 == 0
    assert cipher.decrypt(value) == "4111111111111111"


def test_same_plaintext_gives_different_ciphertext(cipher: FieldCipher):
    first = cipher.encrypt("123")
    second = cipher.encrypt("123")

    assert first.iv != second.iv
    assert first.content != second.content


def test_empty_and_unicode_values(cipher: FieldCipher):
    assert cipher.decrypt(cipher.encrypt("")) == ""
    assert cipher.decrypt(cipher.encrypt("Zoë Müller – ₹")) == "Zoë Müller – ₹"


@pytest.mark.parametrize("key", ["", "abc", "0" * 63, "g" * 64, "0" * 66])
def test_invalid_key_rejected(key):
    with pytest.raises(ConfigurationError):
        FieldCipher(key)


def test_wrong_key_fails(cipher: FieldCipher):
    value = cipher.encrypt("secret value")
    other = FieldCipher("f" * 64)

    # A wrong key almost always breaks the padding; when it does not, the
    # output must still differ from the plaintext.
    try:
        assert other.decrypt(value) != "secret value"
    except DecryptionError:
        pass


def test_malformed_hex_raises(cipher: FieldCipher):
    value = cipher.encrypt("hello")

    with pytest.raises(DecryptionError):
        cipher.decrypt(EncryptedValue(iv=value.iv, content="not-hex"))
    with pytest.raises(DecryptionError):
        cipher.decrypt(EncryptedValue(iv="zz", content=value.content))


def test_wrong_lengths_raise(cipher: FieldCipher):
    value = cipher.encrypt("hello")

    with pytest.raises(DecryptionError):
        cipher.decrypt(EncryptedValue(iv=value.iv[:30], content=value.content))
    with pytest.raises(DecryptionError):
        cipher.decrypt(EncryptedValue(iv=value.iv, content=value.content[:30]))
    with pytest.raises(DecryptionError):
        cipher.decrypt(EncryptedValue(iv=value.iv, content=""))
