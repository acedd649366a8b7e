"""Vault records and error types for vault storage."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
import structlog

logger = structlog.get_logger(__name__)


class CredentialRecord(BaseModel):
    """A single stored credential."""

    model_config = ConfigDict(populate_by_name=True)

    service: str
    username: Optional[str] = None
    secret: str = Field(alias="password")


class Vault(BaseModel):
    """Ordered collection of credential records.

    Services are not required to be unique. ``find`` and ``remove`` act on
    the first matching record in insertion order.
    """

    model_config = ConfigDict(populate_by_name=True)

    records: list[CredentialRecord] = Field(default_factory=list, alias="passwords")

    def add(self, record: CredentialRecord, replace: bool = False) -> None:
        """Append a record.

        Args:
            record: The record to add.
            replace: If True and a record for the same service exists, the
                first such record is replaced in place instead.
        """
        if replace:
            for index, existing in enumerate(self.records):
                if existing.service == record.service:
                    self.records[index] = record
                    logger.debug("replaced_record", service=record.service)
                    return
        self.records.append(record)
        logger.debug("added_record", service=record.service, count=len(self.records))

    def remove(self, service: str) -> bool:
        """Remove the first record for ``service``.

        Returns:
            True if a record was removed, False if none matched.
        """
        for index, record in enumerate(self.records):
            if record.service == service:
                del self.records[index]
                logger.debug("removed_record", service=service, count=len(self.records))
                return True
        return False

    def find(self, service: str) -> Optional[CredentialRecord]:
        """Return the first record for ``service``, if any."""
        for record in self.records:
            if record.service == service:
                return record
        return None

    def list_records(self) -> list[CredentialRecord]:
        """Return the records in insertion order."""
        return list(self.records)


class ErrorKind(str, Enum):
    """Failure categories callers can branch on."""

    IO = "io"
    CORRUPT_SALT = "corrupt_salt"
    CORRUPT_STATE = "corrupt_state"
    AUTHENTICATION_FAILED = "authentication_failed"
    MALFORMED_VAULT = "malformed_vault"
    DERIVATION_FAILURE = "derivation_failure"


class VaultStoreError(Exception):
    """Base exception for vault store operations."""

    kind: ErrorKind = ErrorKind.IO


class VaultNotFoundError(VaultStoreError):
    """Exception raised when the vault file does not exist yet."""


class CorruptSaltError(VaultStoreError):
    """Exception raised when the salt file has the wrong length."""

    kind = ErrorKind.CORRUPT_SALT


class CorruptStateError(VaultStoreError):
    """Exception raised when a vault file exists without its salt."""

    kind = ErrorKind.CORRUPT_STATE


class MalformedVaultError(VaultStoreError):
    """Exception raised when decrypted vault data cannot be decoded."""

    kind = ErrorKind.MALFORMED_VAULT


class LoadFailedError(VaultStoreError):
    """Exception raised when a vault cannot be opened.

    ``kind`` tells the stage that failed. Wrong passwords and tampered
    ciphertext share ``AUTHENTICATION_FAILED`` and the same message.
    """

    def __init__(self, message: str, kind: ErrorKind):
        super().__init__(message)
        self.kind = kind


class PersistenceError(VaultStoreError):
    """Exception raised when the vault or salt cannot be written."""
