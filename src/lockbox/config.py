"""Lockbox configuration."""

import platform
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from .crypto import KdfParameters
from .security import ensure_secure_dir

DEFAULT_VAULT_FILE = "passwords.enc"
DEFAULT_SALT_FILE = "lockbox.salt"


def get_default_data_dir() -> Path:
    """Get platform-specific default data directory."""
    system = platform.system().lower()
    if system == "windows":
        return Path.home() / "AppData/Local/Lockbox"
    elif system == "darwin":
        return Path.home() / "Library/Application Support/Lockbox"
    else:  # Linux and others
        return Path.home() / ".local/share/lockbox"


class LockboxConfig(BaseModel):
    """Resolved locations and key derivation settings.

    Relative ``vault_file``, ``salt_file`` and ``log_dir`` values are
    resolved against ``data_dir``.
    """

    data_dir: Path = Field(default_factory=get_default_data_dir)
    vault_file: Path = Path(DEFAULT_VAULT_FILE)
    salt_file: Path = Path(DEFAULT_SALT_FILE)
    log_dir: Optional[Path] = None
    kdf: KdfParameters = Field(default_factory=KdfParameters)

    @property
    def vault_path(self) -> Path:
        return self.data_dir / self.vault_file

    @property
    def salt_path(self) -> Path:
        return self.data_dir / self.salt_file

    @property
    def log_path(self) -> Path:
        if self.log_dir is None:
            return self.data_dir / "logs"
        return self.data_dir / self.log_dir

    def ensure_dirs(self) -> None:
        """Create the directories holding the vault and salt files."""
        ensure_secure_dir(self.data_dir)
        ensure_secure_dir(self.vault_path.parent)
        ensure_secure_dir(self.salt_path.parent)
