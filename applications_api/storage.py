import logging
import os
import shutil
from datetime import datetime
from typing import BinaryIO, Optional

from .errors import UploadError
from .schemas import StoredFile

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
FALLBACK_NAME = "upload"
MAX_COLLISION_SUFFIX = 1000


def ensure_dir(path: str):
    os.makedirs(path, exist_ok=True)


def split_name(original_name: str):
    """Return ``(basename, extension)`` of an uploaded file name.

    Client supplied directories are dropped; the extension runs from the
    last dot, and a leading dot alone does not start one (``.env``).
    """
    name = os.path.basename((original_name or "").replace("\\", "/"))
    basename, extension = os.path.splitext(name)
    if not basename and not extension:
        basename = FALLBACK_NAME
    return basename, extension


def assign_filename(original_name: str, now: Optional[datetime] = None) -> str:
    basename, extension = split_name(original_name)
    timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return f"{basename}_{timestamp}{extension}"


def _with_suffix(assigned_name: str, n: int) -> str:
    stem, extension = os.path.splitext(assigned_name)
    return f"{stem}-{n}{extension}"


def _open_exclusive(upload_dir: str, assigned_name: str):
    # Same-second uploads of the same name would otherwise overwrite each other.
    candidate = assigned_name
    for n in range(1, MAX_COLLISION_SUFFIX + 1):
        dest = os.path.join(upload_dir, candidate)
        try:
            return candidate, dest, open(dest, "xb")
        except FileExistsError:
            candidate = _with_suffix(assigned_name, n)
    raise UploadError(f"No free file name for {assigned_name!r} in {upload_dir}")


def store_upload(
    fileobj: BinaryIO,
    original_name: str,
    upload_dir: str,
    now: Optional[datetime] = None,
) -> StoredFile:
    """Write an uploaded file under its timestamped name inside ``upload_dir``.

    The directory must already exist. Any I/O failure raises ``UploadError``
    and leaves no partial file behind.
    """
    assigned_name = assign_filename(original_name, now)
    dest = None
    try:
        assigned_name, dest, out = _open_exclusive(upload_dir, assigned_name)
        with out:
            shutil.copyfileobj(fileobj, out)
        size = os.path.getsize(dest)
    except OSError as e:
        if dest is not None and os.path.exists(dest):
            os.remove(dest)
        raise UploadError(f"Could not store upload {original_name!r}: {e}") from e

    logger.info("Stored upload %r as %s (%d bytes)", original_name, assigned_name, size)
    return StoredFile(original_name=original_name or "", assigned_name=assigned_name, path=dest, size=size)


def discard_upload(stored: StoredFile) -> None:
    try:
        os.remove(stored.path)
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning("Could not remove orphaned upload %s", stored.path, exc_info=True)
