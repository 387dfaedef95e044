"""Copy dependency bundles into a page's library directory."""

from __future__ import annotations

import logging
from pathlib import Path

from ..errors import MaterializationError
from ..fingerprints import LibraryEntry, LibraryManifest, hash_files, list_files
from ..paths import normalize_lib_dir
from ..staging import delete_path, promote, stage_files
from .models import Dependency

logger = logging.getLogger(__name__)


class DependencyMaterializer:
    """Materialize dependencies below ``output_dir/lib_dir``.

    Each dependency lands in ``{name}-{version}``. A dependency already present
    with the same name, version and content is reused without writing
    anything. A different version (or different content) under the same name
    is a conflict unless ``overwrite`` is set.
    """

    def __init__(self, output_dir: Path, lib_dir: str | Path = "lib", *, overwrite: bool = False) -> None:
        self._output_dir = Path(output_dir)
        self._lib_dir = normalize_lib_dir(lib_dir)
        self._overwrite = overwrite
        self._materialized: dict[str, Dependency] = {}

    @property
    def lib_root(self) -> Path:
        return self._output_dir / self._lib_dir

    def materialize(self, dependency: Dependency) -> Dependency:
        source_dir = dependency.src.file
        if source_dir is None:
            logger.debug("Dependency '%s' has no local files; nothing to copy.", dependency.name)
            return dependency

        self._check_session_conflict(dependency)
        relative_paths = _collect_files(dependency, source_dir)
        fingerprint = hash_files(source_dir, relative_paths)

        lib_root = self.lib_root
        destination = lib_root / dependency.directory_name
        manifest = LibraryManifest.load(lib_root)
        recorded = manifest.dependencies.get(dependency.name)

        if recorded is not None and recorded.version != dependency.version:
            stale = [lib_root / f"{dependency.name}-{recorded.version}"]
        elif recorded is None:
            stale = _unrecorded_versions(lib_root, dependency, manifest)
        else:
            stale = []

        if stale:
            found = ", ".join(path.name for path in stale)
            if not self._overwrite:
                raise MaterializationError(
                    f"Dependency '{dependency.name}' is already present in {lib_root} as {found}; "
                    f"refusing to add version {dependency.version}."
                )
            logger.info("Replacing dependency '%s' (%s) with %s.", dependency.name, found, dependency.version)
            for path in stale:
                delete_path(path)
            manifest.dependencies.pop(dependency.name, None)
            recorded = None

        if destination.exists():
            if _destination_matches(destination, recorded, relative_paths, fingerprint):
                logger.debug("Dependency '%s' already present at %s; skipping copy.", dependency.name, destination)
                if recorded is None:
                    manifest.dependencies[dependency.name] = LibraryEntry(dependency.version, fingerprint)
                    manifest.save(lib_root)
                return self._located(dependency, destination)
            if not self._overwrite:
                raise MaterializationError(
                    f"{destination} already holds different files for "
                    f"dependency '{dependency.name}' {dependency.version}."
                )
            delete_path(destination)

        staged = stage_files(source_dir, relative_paths, lib_root)
        if not promote(staged, destination):
            # Another writer finished the same dependency first.
            delete_path(staged)
            if _hash_existing(destination, relative_paths) != fingerprint:
                raise MaterializationError(
                    f"{destination} was created concurrently with different content."
                )
        else:
            logger.info("Copied dependency '%s' %s to %s", dependency.name, dependency.version, destination)

        manifest.dependencies[dependency.name] = LibraryEntry(dependency.version, fingerprint)
        manifest.save(lib_root)
        return self._located(dependency, destination)

    def is_current(self, dependency: Dependency) -> bool:
        """Return ``False`` when a later version of ``dependency`` replaced it."""
        latest = self._materialized.get(dependency.name)
        return latest is None or dependency.src.file is None or latest.version == dependency.version

    def _check_session_conflict(self, dependency: Dependency) -> None:
        previous = self._materialized.get(dependency.name)
        if previous is None or previous.version == dependency.version or self._overwrite:
            return
        raise MaterializationError(
            f"Dependencies '{dependency.name}' {previous.version} and {dependency.version} "
            "cannot share one library directory."
        )

    def _located(self, dependency: Dependency, destination: Path) -> Dependency:
        located = dependency.evolve(src=dependency.src.model_copy(update={"file": destination.resolve()}))
        self._materialized[dependency.name] = located
        return located


def materialize(
    dependency: Dependency,
    lib_dir: str | Path,
    output_dir: Path,
    *,
    overwrite: bool = False,
) -> Dependency:
    """Copy ``dependency`` into ``output_dir/lib_dir`` and return the relocated dependency."""
    return DependencyMaterializer(output_dir, lib_dir, overwrite=overwrite).materialize(dependency)


def _collect_files(dependency: Dependency, source_dir: Path) -> list[str]:
    if not source_dir.is_dir():
        raise MaterializationError(
            f"Source directory '{source_dir}' for dependency '{dependency.name}' does not exist."
        )
    declared = [item.path for item in dependency.files]
    missing = [path for path in declared if not (source_dir / path).is_file()]
    if missing:
        raise MaterializationError(
            f"Dependency '{dependency.name}' is missing file(s) in {source_dir}: {', '.join(missing)}"
        )
    if dependency.all_files:
        return list_files(source_dir)
    return sorted(set(declared))


def _unrecorded_versions(lib_root: Path, dependency: Dependency, manifest: LibraryManifest) -> list[Path]:
    """Return directories under ``lib_root`` holding another version of ``dependency``.

    Directories the manifest assigns to other dependencies are not counted.
    """
    if not lib_root.is_dir():
        return []
    prefix = f"{dependency.name}-"
    claimed = {f"{name}-{entry.version}" for name, entry in manifest.dependencies.items()}
    return sorted(
        path
        for path in lib_root.iterdir()
        if path.is_dir()
        and path.name.startswith(prefix)
        and path.name != dependency.directory_name
        and path.name not in claimed
        and not path.name.startswith(".staging-")
    )


def _destination_matches(
    destination: Path,
    recorded: LibraryEntry | None,
    relative_paths: list[str],
    fingerprint: str,
) -> bool:
    if recorded is not None:
        return recorded.fingerprint == fingerprint
    return _hash_existing(destination, relative_paths) == fingerprint


def _hash_existing(root: Path, relative_paths: list[str]) -> str | None:
    """Like ``hash_files`` but returns ``None`` when a file is absent."""
    if not all((root / path).is_file() for path in relative_paths):
        return None
    return hash_files(root, relative_paths)
