"""Persistence of the entitlement record.

The record lives in a single dot-file inside the host-supplied per-user data
directory.  Its content is the record's JSON run through a
:class:`~trialkey.codec.RecordCodec` (base64 by default).

Reading is forgiving: a missing, unreadable or corrupt file all come back as
``None`` so the engine can re-initialise.  Writing is not: any failure to
create the directory or write the file raises :class:`StorageError`.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .codec import Base64Codec, RecordCodec
from .errors import RecordDecodeError, StorageError
from .logger import get_logger
from .models import EntitlementRecord

LICENSE_FILENAME = ".license_data"

# Windows FILE_ATTRIBUTE_HIDDEN
_FILE_ATTRIBUTE_HIDDEN = 0x02

log = get_logger("storage")


def license_path(root_dir: Path) -> Path:
    return Path(root_dir) / LICENSE_FILENAME


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------

def load_record(
    root_dir: Path, codec: Optional[RecordCodec] = None
) -> Optional[EntitlementRecord]:
    """Load the record under *root_dir*, or ``None`` if absent or corrupt."""
    codec = codec or Base64Codec()
    path = license_path(root_dir)
    if not path.exists():
        return None

    try:
        content = path.read_text(encoding="utf-8")
        payload = codec.decode(content).decode("utf-8")
        return EntitlementRecord.model_validate_json(payload)
    except (OSError, UnicodeDecodeError, RecordDecodeError, ValidationError) as exc:
        log.warning("Discarding unreadable license record %s: %s", path, exc)
        return None


def save_record(
    root_dir: Path, record: EntitlementRecord, codec: Optional[RecordCodec] = None
) -> Path:
    """Encode *record* and write it under *root_dir*, creating directories."""
    codec = codec or Base64Codec()
    path = license_path(root_dir)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageError(f"Failed to create directory: {exc}") from exc

    payload = json.dumps(record.model_dump(mode="json", by_alias=True))
    encoded = codec.encode(payload.encode("utf-8"))

    try:
        _write_text(path, encoded)
    except OSError as exc:
        raise StorageError(f"Failed to write license file: {exc}") from exc

    _hide_file(path)
    return path


def _write_text(path: Path, text: str) -> None:
    # Truncating in place keeps working once the file carries the hidden
    # attribute; Windows refuses to re-create hidden files with mode "w".
    mode = "r+" if path.is_file() else "w"
    with path.open(mode, encoding="utf-8") as fp:
        fp.write(text)
        fp.truncate()


def _hide_file(path: Path) -> None:
    """Mark *path* hidden on Windows. Failure is never an error."""
    if os.name != "nt":
        return
    try:
        _set_hidden_attribute(path)
    except (AttributeError, OSError) as exc:
        log.debug("Could not hide %s: %s", path, exc)


def _set_hidden_attribute(path: Path) -> None:
    import ctypes

    if not ctypes.windll.kernel32.SetFileAttributesW(str(path), _FILE_ATTRIBUTE_HIDDEN):
        raise ctypes.WinError()


__all__ = ["LICENSE_FILENAME", "license_path", "load_record", "save_record"]
