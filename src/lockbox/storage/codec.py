"""Canonical encoding of the vault plaintext."""

from pydantic import ValidationError

from .base import MalformedVaultError, Vault


def encode(vault: Vault) -> bytes:
    """Serialize a vault to UTF-8 JSON.

    Records keep their order; an absent username is written as ``null``.
    """
    return vault.model_dump_json(by_alias=True, indent=2).encode("utf-8")


def decode(data: bytes) -> Vault:
    """Parse bytes produced by :func:`encode`.

    Raises:
        MalformedVaultError: If the data is not UTF-8 JSON of the expected
            shape, or a record lacks ``service`` or ``password``.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedVaultError(f"Vault data is not valid UTF-8: {e}") from e

    try:
        return Vault.model_validate_json(
            text, strict=True, by_alias=True, by_name=False
        )
    except ValidationError as e:
        raise MalformedVaultError(
            f"Vault data is malformed ({e.error_count()} error(s))"
        ) from e
