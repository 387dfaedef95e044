"""Content fingerprints and the per-library record of materialized dependencies."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable

from .errors import MaterializationError
from .staging import write_atomic


MANIFEST_FILENAME = ".pagekit.json"
MANIFEST_VERSION = 1


@dataclass(frozen=True)
class LibraryEntry:
    """Name, version and content hash of one materialized dependency."""

    version: str
    fingerprint: str


@dataclass
class LibraryManifest:
    """Snapshot of the dependencies currently stored in a library directory."""

    version: int = MANIFEST_VERSION
    dependencies: Dict[str, LibraryEntry] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "version": self.version,
            "dependencies": {
                name: {"version": entry.version, "fingerprint": entry.fingerprint}
                for name, entry in sorted(self.dependencies.items())
            },
        }

    @classmethod
    def load(cls, lib_root: Path) -> "LibraryManifest":
        path = lib_root / MANIFEST_FILENAME
        if not path.exists():
            return cls()
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise MaterializationError(f"Library manifest {path} is not valid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise MaterializationError(f"Library manifest {path} must contain a JSON object.")

        entries: Dict[str, LibraryEntry] = {}
        for name, raw in dict(payload.get("dependencies") or {}).items():
            if not isinstance(raw, dict):
                continue
            entries[name] = LibraryEntry(
                version=str(raw.get("version") or ""),
                fingerprint=str(raw.get("fingerprint") or ""),
            )
        version = int(payload.get("version") or MANIFEST_VERSION)
        return cls(version=version, dependencies=entries)

    def save(self, lib_root: Path) -> None:
        lib_root.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(self.to_dict(), ensure_ascii=False, indent=2)
        write_atomic(lib_root / MANIFEST_FILENAME, payload.encode("utf-8"))


def hash_files(root: Path, relative_paths: Iterable[str]) -> str:
    """Hash the names and bytes of ``relative_paths`` under ``root``."""
    hasher = hashlib.sha256()
    for relative in sorted(set(relative_paths)):
        hasher.update(relative.encode("utf-8"))
        hasher.update(b"\0")
        hasher.update((root / relative).read_bytes())
        hasher.update(b"\0")
    return hasher.hexdigest()


def list_files(root: Path) -> list[str]:
    """Return every file below ``root`` as a sorted list of POSIX relative paths."""
    files: list[str] = []
    for entry in root.rglob("*"):
        if entry.is_file():
            files.append(entry.relative_to(root).as_posix())
    return sorted(files)
