"""Cryptographic primitives for the vault file."""

from .encryption import (
    KEY_SIZE,
    NONCE_SIZE,
    TAG_SIZE,
    AuthenticationError,
    EncryptionError,
    decrypt,
    encrypt,
)
from .keys import (
    DEFAULT_KDF_PARAMETERS,
    SALT_SIZE,
    DerivationError,
    KdfParameters,
    derive_key,
)

__all__ = [
    # Encryption
    "encrypt",
    "decrypt",
    "EncryptionError",
    "AuthenticationError",
    "KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
    # Key derivation
    "derive_key",
    "DerivationError",
    "KdfParameters",
    "DEFAULT_KDF_PARAMETERS",
    "SALT_SIZE",
]
