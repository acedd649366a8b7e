"""Authenticated encryption of the serialized vault."""

import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
import structlog

logger = structlog.get_logger(__name__)

KEY_SIZE = 32  # AES-256
NONCE_SIZE = 12  # 96-bit nonce for GCM
TAG_SIZE = 16

_AUTH_FAILURE_MESSAGE = "Master password incorrect or vault data corrupted"


class EncryptionError(Exception):
    """Base exception for encryption operations."""


class AuthenticationError(EncryptionError):
    """Exception raised when a blob fails to authenticate.

    Covers a truncated blob, a bad tag and a wrong key alike.
    """

    def __init__(self, message: str = _AUTH_FAILURE_MESSAGE):
        super().__init__(message)


def _cipher(key: bytes) -> AESGCM:
    if len(key) != KEY_SIZE:
        raise EncryptionError(f"Key must be {KEY_SIZE} bytes, got {len(key)}")
    return AESGCM(key)


def encrypt(plaintext: bytes, key: bytes) -> bytes:
    """Encrypt data using AES-256-GCM.

    Args:
        plaintext: The data to encrypt.
        key: 32-byte encryption key.

    Returns:
        ``nonce || ciphertext_with_tag`` with a fresh random nonce.

    Raises:
        EncryptionError: If the key has the wrong size.
    """
    aesgcm = _cipher(key)
    nonce = os.urandom(NONCE_SIZE)
    ciphertext = aesgcm.encrypt(nonce, plaintext, None)

    logger.debug("encrypted_data", data_size=len(plaintext))
    return nonce + ciphertext


def decrypt(blob: bytes, key: bytes) -> bytes:
    """Decrypt a blob produced by :func:`encrypt`.

    Args:
        blob: ``nonce || ciphertext_with_tag``.
        key: 32-byte encryption key.

    Returns:
        The plaintext.

    Raises:
        AuthenticationError: If the blob is too short, was tampered with,
            or the key is wrong.
        EncryptionError: If the key has the wrong size.
    """
    aesgcm = _cipher(key)
    if len(blob) < NONCE_SIZE + TAG_SIZE:
        raise AuthenticationError()

    nonce, ciphertext = blob[:NONCE_SIZE], blob[NONCE_SIZE:]
    try:
        plaintext = aesgcm.decrypt(nonce, ciphertext, None)
    except InvalidTag:
        raise AuthenticationError() from None

    logger.debug("decrypted_data", data_size=len(plaintext))
    return plaintext
