"""
Platform-aware secure file operations for vault and salt files.

Files are written to a temporary sibling, flushed to disk and renamed into
place, so a crash mid-write never leaves a truncated file at the target path.
On POSIX the parent directory is fsynced too so the rename itself is durable.

Platform-specific security notes:
- POSIX: file mode 0600 for files, 0700 for directories
- Windows: relies on the per-user profile directory ACLs
"""

import os
import sys
import tempfile
from pathlib import Path
from typing import Union

import structlog

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


def ensure_secure_dir(path: PathLike) -> Path:
    """
    Create a directory readable only by the owner if it does not exist.

    Args:
        path: Directory to create

    Returns:
        The directory as a Path
    """
    path = Path(path)
    os.makedirs(path, mode=0o700, exist_ok=True)
    return path


def _fsync_dir(path: Path) -> None:
    """Flush a directory entry so a rename inside it survives a crash."""
    fd = os.open(path, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def write_secure_file(path: PathLike, data: bytes) -> None:
    """
    Atomically replace ``path`` with ``data``.

    Args:
        path: Target file
        data: Bytes to write

    Raises:
        OSError: If any step of the write fails. The previous file at
            ``path``, if any, is left untouched.
    """
    path = Path(path)

    # mkstemp creates the file with mode 0600 on POSIX
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise

    if sys.platform != "win32":
        os.chmod(path, 0o600)
        _fsync_dir(path.parent)

    logger.debug("wrote_secure_file", path=str(path), size=len(data))
