"""
Filesystem output for encoded images.

Files land under ~/Documents unless PLAYGROUND_DOCUMENTS_DIR points elsewhere.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Union

from graphics import WriteFailure

DOCUMENTS_DIR_ENV = "PLAYGROUND_DOCUMENTS_DIR"


def storage_path() -> Path:
    """
    Directory that output files are written to.
    """
    override = os.getenv(DOCUMENTS_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / "Documents"


def _ensure_dir(path: Path) -> None:
    os.makedirs(path, exist_ok=True)


def write_atomic(path: Union[str, Path], data: bytes) -> Path:
    """
    Write bytes so that the destination is either fully replaced or untouched.
    Data goes to a temporary file in the destination directory, which is then
    renamed over the destination. OS errors raise WriteFailure.
    """
    dest = Path(path)
    tmp_name = None
    try:
        _ensure_dir(dest.parent)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".tmp", dir=dest.parent)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, dest)
        tmp_name = None
    except OSError as e:
        raise WriteFailure(f"could not write {dest}: {e}") from e
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.remove(tmp_name)
    return dest


def save_to_documents(filename: str, data: bytes) -> Path:
    """
    Atomically write bytes to a file in the documents directory.
    """
    return write_atomic(storage_path() / filename, data)
