"""Encrypted vault file storage.

A vault lives in two files: the salt file (16 raw bytes) and the vault file
(``nonce || ciphertext_with_tag``). A new salt is only ever generated by the
first save of a vault, so the salt and the first ciphertext always come from
the same session.
"""

from enum import Enum
from pathlib import Path
from typing import Optional, Union

import structlog

from ..crypto import (
    DEFAULT_KDF_PARAMETERS,
    AuthenticationError,
    DerivationError,
    KdfParameters,
    decrypt,
    derive_key,
    encrypt,
)
from ..security import write_secure_file
from .base import (
    CorruptStateError,
    ErrorKind,
    LoadFailedError,
    MalformedVaultError,
    PersistenceError,
    Vault,
    VaultNotFoundError,
)
from .codec import decode, encode
from .salt import SaltStore

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


class VaultState(str, Enum):
    """State of the salt and vault files on disk."""

    UNINITIALIZED = "uninitialized"
    SALT_ONLY = "salt_only"
    INITIALIZED = "initialized"
    # Vault file present but salt lost; unrecoverable
    CORRUPT = "corrupt"


def inspect_state(vault_path: PathLike, salt_path: PathLike) -> VaultState:
    """Inspect which of the two files exist."""
    vault_exists = Path(vault_path).exists()
    salt_exists = Path(salt_path).exists()
    if vault_exists and salt_exists:
        return VaultState.INITIALIZED
    if vault_exists:
        return VaultState.CORRUPT
    if salt_exists:
        return VaultState.SALT_ONLY
    return VaultState.UNINITIALIZED


class VaultSession:
    """Binds a vault file, its salt file and the master password.

    The session derives the key lazily and pins the ``(salt, key)`` pair
    after the first successful load or save, so later operations on the
    same session skip the key derivation.
    """

    def __init__(
        self,
        vault_path: PathLike,
        salt_path: PathLike,
        password: Union[str, bytes],
        kdf_params: KdfParameters = DEFAULT_KDF_PARAMETERS,
    ):
        self.vault_path = Path(vault_path)
        self.salt_store = SaltStore(salt_path)
        self.kdf_params = kdf_params
        self._password = password
        self._salt: Optional[bytes] = None
        self._key: Optional[bytes] = None

    @property
    def salt_path(self) -> Path:
        return self.salt_store.path

    @property
    def state(self) -> VaultState:
        return inspect_state(self.vault_path, self.salt_path)

    def _derive(self, salt: bytes) -> bytes:
        if self._key is not None and self._salt == salt:
            return self._key
        return derive_key(self._password, salt, self.kdf_params)

    def _pin(self, salt: bytes, key: bytes) -> None:
        self._salt = salt
        self._key = key

    def load(self) -> Vault:
        """Read and decrypt the vault.

        Returns:
            The decoded vault.

        Raises:
            VaultNotFoundError: If the vault file does not exist.
            CorruptStateError: If the vault exists but its salt is missing.
            CorruptSaltError: If the salt file has the wrong length.
            LoadFailedError: If the vault cannot be read, authenticated or
                decoded. ``kind`` names the failing stage.
        """
        try:
            with open(self.vault_path, "rb") as f:
                blob = f.read()
        except FileNotFoundError:
            raise VaultNotFoundError(f"Vault not found: {self.vault_path}") from None
        except OSError as e:
            raise LoadFailedError(
                f"Cannot read vault {self.vault_path}: {e.strerror or e}", ErrorKind.IO
            ) from e

        try:
            salt = self.salt_store.load()
        except FileNotFoundError:
            raise CorruptStateError(
                f"Vault {self.vault_path} exists but salt file "
                f"{self.salt_path} is missing; the vault cannot be decrypted"
            ) from None
        except OSError as e:
            raise LoadFailedError(
                f"Cannot read salt {self.salt_path}: {e.strerror or e}", ErrorKind.IO
            ) from e

        try:
            key = self._derive(salt)
        except DerivationError as e:
            raise LoadFailedError(str(e), ErrorKind.DERIVATION_FAILURE) from e

        try:
            plaintext = decrypt(blob, key)
        except AuthenticationError as e:
            logger.warning("vault_authentication_failed", path=str(self.vault_path))
            raise LoadFailedError(str(e), ErrorKind.AUTHENTICATION_FAILED) from e

        try:
            vault = decode(plaintext)
        except MalformedVaultError as e:
            logger.error("vault_malformed", path=str(self.vault_path), error=str(e))
            raise LoadFailedError(str(e), ErrorKind.MALFORMED_VAULT) from e

        self._pin(salt, key)
        logger.info(
            "vault_loaded", path=str(self.vault_path), records=len(vault.records)
        )
        return vault

    def load_or_init(self) -> Vault:
        """Load the vault, or return an empty one if it does not exist yet."""
        try:
            return self.load()
        except VaultNotFoundError:
            logger.info("vault_initialized", path=str(self.vault_path))
            return Vault()

    def save(self, vault: Vault) -> None:
        """Encrypt and write the vault, creating the salt on first save.

        The vault file is replaced atomically. ``vault`` is not modified.

        Raises:
            CorruptStateError: If the vault exists but its salt is missing.
            CorruptSaltError: If the salt file has the wrong length.
            PersistenceError: If the salt or the vault cannot be written.
            DerivationError: If the key derivation parameters are invalid.
        """
        if self.state is VaultState.CORRUPT:
            raise CorruptStateError(
                f"Vault {self.vault_path} exists but salt file "
                f"{self.salt_path} is missing; refusing to overwrite it"
            )

        try:
            salt, created = self.salt_store.load_or_create()
        except OSError as e:
            raise PersistenceError(
                f"Cannot write salt {self.salt_path}: {e.strerror or e}"
            ) from e

        key = self._derive(salt)
        blob = encrypt(encode(vault), key)

        try:
            write_secure_file(self.vault_path, blob)
        except OSError as e:
            logger.error(
                "vault_save_failed", path=str(self.vault_path), error=str(e)
            )
            raise PersistenceError(
                f"Cannot write vault {self.vault_path}: {e.strerror or e}"
            ) from e

        self._pin(salt, key)
        logger.info(
            "vault_saved",
            path=str(self.vault_path),
            records=len(vault.records),
            new_salt=created,
        )


def load(
    vault_path: PathLike,
    salt_path: PathLike,
    password: Union[str, bytes],
    kdf_params: KdfParameters = DEFAULT_KDF_PARAMETERS,
) -> Vault:
    """Load a vault. See :meth:`VaultSession.load`."""
    return VaultSession(vault_path, salt_path, password, kdf_params).load()


def load_or_init(
    vault_path: PathLike,
    salt_path: PathLike,
    password: Union[str, bytes],
    kdf_params: KdfParameters = DEFAULT_KDF_PARAMETERS,
) -> Vault:
    """Load a vault, returning an empty one if the file does not exist."""
    return VaultSession(vault_path, salt_path, password, kdf_params).load_or_init()


def save(
    vault: Vault,
    vault_path: PathLike,
    salt_path: PathLike,
    password: Union[str, bytes],
    kdf_params: KdfParameters = DEFAULT_KDF_PARAMETERS,
) -> None:
    """Save a vault. See :meth:`VaultSession.save`."""
    VaultSession(vault_path, salt_path, password, kdf_params).save(vault)
