"""
Vault Crypto Core — Per-secret key derivation and envelope encryption.

Each secret is sealed under its own key:
    PBKDF2-HMAC-SHA256(master_key, salt, 100 000 rounds) → AES-256-GCM

Wire format (base64 text, stable, changes require migrating stored records):
    [salt 32B][iv 16B][tag 16B][ciphertext]

Security Note:
    Never log plaintext or ciphertext values.
    Salt and IV are regenerated on every call, so sealing the same secret
    twice never yields the same blob.
"""
import os
import base64
import binascii
import logging
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..errors import DecryptionError, ValidationError
from .config import MASTER_KEY_LENGTH, normalize_master_key

logger = logging.getLogger("byok.vault")

SALT_SIZE = 32
IV_SIZE = 16  # 128-bit IV
TAG_SIZE = 16  # GCM tag
KEY_LENGTH = MASTER_KEY_LENGTH
PBKDF2_ITERATIONS = 100_000

HEADER_SIZE = SALT_SIZE + IV_SIZE + TAG_SIZE


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(master_key: bytes, salt: bytes) -> bytes:
    """Derive a 32-byte encryption key using PBKDF2-HMAC-SHA256.

    Same master key and salt always give the same key.

    Args:
        master_key: Raw 32-byte master key.
        salt: Per-secret random salt.

    Returns:
        32-byte derived key.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(master_key)


# ---------------------------------------------------------------------------
# Envelope encryption
# ---------------------------------------------------------------------------

def encrypt_secret(plaintext: str, master_key: Any) -> str:
    """Encrypt a secret string under a key derived from master_key.

    Format: base64([salt 32B][iv 16B][tag 16B][ciphertext])

    Args:
        plaintext: Non-empty secret to encrypt.
        master_key: Master key in any form accepted by
            :func:`normalize_master_key`.

    Returns:
        Base64-encoded envelope.

    Raises:
        ValidationError: If plaintext is empty or not a string.
        ConfigurationError: If master_key is not 32 bytes.
    """
    if not plaintext or not isinstance(plaintext, str):
        raise ValidationError("Plaintext must be a non-empty string")
    key_bytes = normalize_master_key(master_key)

    salt = os.urandom(SALT_SIZE)
    iv = os.urandom(IV_SIZE)
    cipher = AESGCM(derive_key(key_bytes, salt))
    sealed = cipher.encrypt(iv, plaintext.encode("utf-8"), None)
    # AESGCM appends the tag; the envelope stores it ahead of the ciphertext.
    ct, tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]
    return base64.b64encode(salt + iv + tag + ct).decode("ascii")


def decrypt_secret(blob: str, master_key: Any) -> str:
    """Decrypt an envelope produced by :func:`encrypt_secret`.

    Args:
        blob: Base64-encoded envelope.
        master_key: Master key in any form accepted by
            :func:`normalize_master_key`.

    Returns:
        Decrypted plaintext string.

    Raises:
        ValidationError: If blob is empty or not a string.
        ConfigurationError: If master_key is not 32 bytes.
        DecryptionError: For any malformed, tampered or foreign envelope.
    """
    if not blob or not isinstance(blob, str):
        raise ValidationError("Ciphertext must be a non-empty string")
    key_bytes = normalize_master_key(master_key)

    try:
        combined = base64.b64decode(blob, validate=True)
        if len(combined) < HEADER_SIZE:
            raise ValueError(
                f"envelope too short: {len(combined)} bytes "
                f"(minimum {HEADER_SIZE})"
            )
        salt = combined[:SALT_SIZE]
        iv = combined[SALT_SIZE:SALT_SIZE + IV_SIZE]
        tag = combined[SALT_SIZE + IV_SIZE:HEADER_SIZE]
        ct = combined[HEADER_SIZE:]
        cipher = AESGCM(derive_key(key_bytes, salt))
        plaintext = cipher.decrypt(iv, ct + tag, None)
        return plaintext.decode("utf-8")
    except (InvalidTag, binascii.Error, ValueError) as err:
        raise DecryptionError() from err
