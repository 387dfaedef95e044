"""Pure path arithmetic for embedding local files in HTML references."""

from __future__ import annotations

import logging
import ntpath
import posixpath
from pathlib import Path, PurePath, PurePosixPath, PureWindowsPath
from typing import TYPE_CHECKING
from urllib.parse import quote

from .errors import PathError

if TYPE_CHECKING:
    from .dependencies.models import Dependency

logger = logging.getLogger(__name__)


def relativize(start: str | PurePath, target: str | PurePath) -> str:
    """Return ``target`` expressed relative to the directory ``start``.

    Both paths must be absolute. The result always uses ``/`` separators so it
    can be embedded in ``href``/``src`` attributes regardless of the host
    platform. The process working directory is never consulted.
    """
    start_path = start if isinstance(start, PurePath) else PurePath(start)
    target_path = target if isinstance(target, PurePath) else PurePath(target)
    if isinstance(start_path, PureWindowsPath) != isinstance(target_path, PureWindowsPath):
        raise PathError(f"Cannot relate paths of different flavours: '{start}' and '{target}'.")
    for candidate in (start_path, target_path):
        if not candidate.is_absolute():
            raise PathError(f"Expected an absolute path, got '{candidate}'.")

    windows = isinstance(start_path, PureWindowsPath)
    module = ntpath if windows else posixpath
    try:
        relative = module.relpath(str(target_path), str(start_path))
    except ValueError as exc:
        # Different drives or UNC shares have no relative path between them.
        raise PathError(f"Unable to express '{target}' relative to '{start}': {exc}") from exc

    if windows:
        relative = relative.replace("\\", "/")
    return relative


def normalize_lib_dir(lib_dir: str | PurePath) -> str:
    """Validate a library sub-directory name and return it with ``/`` separators.

    The value must stay inside the output directory: absolute paths, empty
    values and ``..`` segments are rejected.
    """
    text = str(lib_dir).strip().replace("\\", "/")
    candidate = PurePosixPath(text)
    if not text or not candidate.parts or candidate.is_absolute() or PureWindowsPath(text).drive:
        raise PathError(f"Library directory '{lib_dir}' must be a relative path.")
    if ".." in candidate.parts:
        raise PathError(f"Library directory '{lib_dir}' must not leave the output directory.")
    return candidate.as_posix()


def relativize_dependency(dependency: "Dependency", base_dir: Path) -> "Dependency":
    """Point ``dependency.src.href`` at its local files, relative to ``base_dir``.

    The href is URL-quoted, so ``#``, ``?`` and spaces in a name or version
    stay part of the path. Dependencies without a local directory are
    returned unchanged. When no relative path exists the original
    dependency is kept as-is.
    """
    source_dir = dependency.src.file
    if source_dir is None:
        return dependency
    try:
        href = relativize(base_dir, source_dir)
    except PathError as exc:
        logger.warning("Keeping original location for dependency '%s': %s", dependency.name, exc)
        return dependency
    return dependency.evolve(src=dependency.src.model_copy(update={"href": quote(href, safe="/")}))
