"""Filesystem helpers that stage output before moving it into place."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterable


def stage_files(source: Path, relative_paths: Iterable[str], staging_root: Path) -> Path:
    """Copy ``relative_paths`` from ``source`` into a fresh directory under ``staging_root``.

    Returns the staging directory; the caller promotes or discards it.
    """
    staging_root.mkdir(parents=True, exist_ok=True)
    staged = Path(tempfile.mkdtemp(prefix=".staging-", dir=staging_root))
    try:
        for relative in relative_paths:
            destination = staged / relative
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source / relative, destination)
    except BaseException:
        delete_path(staged, ignore_errors=True)
        raise
    return staged


def promote(staged: Path, destination: Path) -> bool:
    """Rename ``staged`` to ``destination``.

    Returns ``False`` without touching ``destination`` when it already exists.
    """
    try:
        os.rename(staged, destination)
    except OSError:
        if destination.exists():
            return False
        raise
    return True


def write_atomic(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` through a temporary sibling file and a rename."""
    handle = tempfile.NamedTemporaryFile(
        mode="wb",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(handle.name)
    try:
        with handle:
            handle.write(data)
        os.replace(temp_path, path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


def delete_path(path: Path, *, ignore_errors: bool = False) -> None:
    if path.is_dir():
        shutil.rmtree(path, ignore_errors=ignore_errors)
    else:
        path.unlink(missing_ok=True)
