"""Encrypted vault storage."""

from .base import (
    CorruptSaltError,
    CorruptStateError,
    CredentialRecord,
    ErrorKind,
    LoadFailedError,
    MalformedVaultError,
    PersistenceError,
    Vault,
    VaultNotFoundError,
    VaultStoreError,
)
from .codec import decode, encode
from .salt import SaltStore
from .vault import (
    VaultSession,
    VaultState,
    inspect_state,
    load,
    load_or_init,
    save,
)

__all__ = [
    # Records
    "CredentialRecord",
    "Vault",
    # Storage
    "SaltStore",
    "VaultSession",
    "VaultState",
    "inspect_state",
    "load",
    "load_or_init",
    "save",
    "encode",
    "decode",
    # Errors
    "ErrorKind",
    "VaultStoreError",
    "VaultNotFoundError",
    "CorruptSaltError",
    "CorruptStateError",
    "MalformedVaultError",
    "LoadFailedError",
    "PersistenceError",
]
