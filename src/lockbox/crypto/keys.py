"""Master password key derivation."""

from typing import Union

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw
from pydantic import BaseModel, Field
import structlog

from .encryption import EncryptionError, KEY_SIZE

logger = structlog.get_logger(__name__)

SALT_SIZE = 16


class DerivationError(EncryptionError):
    """Exception raised when key derivation is misconfigured."""


class KdfParameters(BaseModel):
    """Argon2id cost parameters."""

    time_cost: int = Field(default=2, ge=1)  # Number of iterations
    memory_cost: int = Field(default=19456, ge=8)  # KiB
    parallelism: int = Field(default=1, ge=1)  # Number of lanes


DEFAULT_KDF_PARAMETERS = KdfParameters()


def derive_key(
    password: Union[str, bytes],
    salt: bytes,
    params: KdfParameters = DEFAULT_KDF_PARAMETERS,
) -> bytes:
    """Derive a 32-byte vault key from the master password using Argon2id.

    The password is used in full; text passwords are UTF-8 encoded.

    Args:
        password: The master password.
        salt: The 16-byte vault salt.
        params: Argon2id cost parameters.

    Returns:
        The derived key.

    Raises:
        DerivationError: If the salt or the cost parameters are invalid.
    """
    if isinstance(password, str):
        password = password.encode("utf-8")

    if len(salt) != SALT_SIZE:
        raise DerivationError(
            f"Salt must be {SALT_SIZE} bytes, got {len(salt)}"
        )

    try:
        key = hash_secret_raw(
            secret=password,
            salt=salt,
            time_cost=params.time_cost,
            memory_cost=params.memory_cost,
            parallelism=params.parallelism,
            hash_len=KEY_SIZE,
            type=Type.ID,
        )
    except HashingError as e:
        raise DerivationError(f"Failed to derive key: {e}") from e

    logger.debug(
        "derived_key",
        method="argon2id",
        time_cost=params.time_cost,
        memory_cost=params.memory_cost,
    )
    return key
