"""
Exporter - Writes printable snapshots of the inventory and the receipt to disk
Provides timestamp generation, atomic file writes and export file naming
"""

import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol, Union

from config import EXPORT_DIR, TIMESTAMP_FORMAT
from models import InventoryError, OperationResult

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class Printable(Protocol):
    """Anything that can render its state as text and persist it"""

    def get_file_content(self, timestamp: Optional[str] = None) -> str:
        ...

    def print_to_file(self, filepath: PathLike) -> bool:
        ...


def now_timestamp(now: Optional[datetime] = None) -> str:
    """Format the current local time for headers and file names"""
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def _default_file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def export_to_file(content: str, filepath: PathLike) -> bool:
    """
    Write content to filepath atomically

    The content goes to a temporary file in the target directory first and
    is moved into place only once fully flushed, so the target either holds
    the whole content or is left untouched.

    Returns:
        True if the file was written, False otherwise
    """
    target = Path(filepath)
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=target.parent,
                                         prefix=f".{target.name}.", suffix=".tmp",
                                         delete=False) as tmp:
            tmp_path = tmp.name
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        # Temporary files are created 0600; give the export the usual umask mode
        os.chmod(tmp_path, _default_file_mode())
        os.replace(tmp_path, target)
        tmp_path = None
        logger.info("Wrote %d characters to %s", len(content), target)
        return True
    except OSError as e:
        logger.error("Failed to write %s: %s", target, e)
        return False
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)


def build_export_path(prefix: str, directory: PathLike = EXPORT_DIR,
                      timestamp: Optional[str] = None) -> Path:
    """Build '<directory>/<prefix>_<timestamp>.txt'"""
    return Path(directory) / f"{prefix}_{timestamp or now_timestamp()}.txt"


def export_printable(entity: Printable, prefix: str, directory: PathLike = EXPORT_DIR,
                     timestamp: Optional[str] = None) -> OperationResult:
    """Export a printable entity to a freshly named file in directory"""
    filepath = build_export_path(prefix, directory, timestamp)
    if entity.print_to_file(filepath):
        return OperationResult.success(f"Exported to {filepath}", path=str(filepath))
    return OperationResult.failure(
        InventoryError.FILE_WRITE_FAILED,
        f"Failed to export {prefix} to {filepath}",
        path=str(filepath)
    )
