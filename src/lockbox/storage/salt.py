"""Salt file persistence."""

import os
from pathlib import Path
from typing import Tuple, Union

import structlog

from ..crypto import SALT_SIZE
from ..security import write_secure_file
from .base import CorruptSaltError

logger = structlog.get_logger(__name__)


class SaltStore:
    """Stores the single salt associated with a vault file."""

    def __init__(self, path: Union[str, Path]):
        """Initialize the salt store.

        Args:
            path: Location of the salt file.
        """
        self.path = Path(path)

    def exists(self) -> bool:
        """Check whether the salt file exists."""
        return self.path.exists()

    def load(self) -> bytes:
        """Read the salt.

        Returns:
            The 16 salt bytes.

        Raises:
            FileNotFoundError: If the salt file doesn't exist.
            CorruptSaltError: If the salt file is not exactly 16 bytes.
        """
        with open(self.path, "rb") as f:
            salt = f.read()

        if len(salt) != SALT_SIZE:
            raise CorruptSaltError(
                f"Salt file {self.path} must contain {SALT_SIZE} bytes, "
                f"found {len(salt)}"
            )
        return salt

    def load_or_create(self) -> Tuple[bytes, bool]:
        """Read the salt, generating and storing a new one if absent.

        Returns:
            Tuple of (salt, created).

        Raises:
            CorruptSaltError: If an existing salt file is malformed.
            OSError: If a new salt cannot be written.
        """
        try:
            salt = self.load()
        except FileNotFoundError:
            pass
        else:
            logger.debug("using_existing_salt", path=str(self.path))
            return salt, False

        salt = os.urandom(SALT_SIZE)
        write_secure_file(self.path, salt)
        logger.info("generated_salt", path=str(self.path))
        return salt, True
