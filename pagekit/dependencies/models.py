"""Typed representations of page asset dependencies."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

FileKind = Literal["stylesheet", "script"]


class DependencySource(BaseModel):
    """Where a dependency's files can be found."""

    model_config = ConfigDict(frozen=True)

    file: Path | None = Field(default=None, description="Local directory holding the files.")
    href: str | None = Field(default=None, description="URL prefix the files are served from.")

    @field_validator("file", mode="before")
    def _ensure_path(cls, value: Any) -> Path | None:
        if value is None or value == "":
            return None
        return Path(value)

    @field_validator("href")
    def _strip_trailing_slash(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if text not in {"/", ""}:
            text = text.rstrip("/")
        return text or None

    @model_validator(mode="after")
    def _require_location(self) -> "DependencySource":
        if self.file is None and self.href is None:
            raise ValueError("A dependency source needs a 'file' directory or an 'href' prefix.")
        return self


class DependencyFile(BaseModel):
    """A single stylesheet or script belonging to a dependency."""

    model_config = ConfigDict(frozen=True)

    kind: FileKind
    path: str = Field(description="Path relative to the dependency directory.")
    attributes: dict[str, str | bool] = Field(default_factory=dict)

    @field_validator("path")
    def _ensure_relative(cls, value: str) -> str:
        normalized = value.strip().replace("\\", "/")
        candidate = PurePosixPath(normalized)
        if not normalized or candidate.is_absolute() or ".." in candidate.parts:
            raise ValueError(f"File path '{value}' must be relative to the dependency directory.")
        return candidate.as_posix()


class Dependency(BaseModel):
    """A named, versioned bundle of stylesheets and scripts."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    version: str
    src: DependencySource
    files: list[DependencyFile] = Field(default_factory=list)
    meta: dict[str, str] = Field(default_factory=dict)
    head: str | None = Field(default=None, description="Extra markup placed in the document head.")
    all_files: bool = Field(
        default=True,
        description="Copy the whole source directory instead of only the referenced files.",
    )

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data: Any) -> Any:
        """Accept ``stylesheet``/``script`` lists as shorthand for ``files``."""
        if not isinstance(data, dict):
            return data
        if "stylesheet" not in data and "script" not in data:
            return data
        payload = dict(data)
        files = list(payload.pop("files", None) or [])
        for kind in ("stylesheet", "script"):
            entries = payload.pop(kind, None) or []
            if isinstance(entries, str):
                entries = [entries]
            files.extend({"kind": kind, "path": entry} for entry in entries)
        payload["files"] = files
        return payload

    @field_validator("name", "version", mode="before")
    def _ensure_segment(cls, value: Any) -> str:
        text = str(value).strip() if value is not None else ""
        if not text or text in {".", ".."} or "/" in text or "\\" in text:
            raise ValueError(f"'{value}' cannot be used as a directory name segment.")
        return text

    @property
    def directory_name(self) -> str:
        return f"{self.name}-{self.version}"

    @property
    def stylesheets(self) -> list[DependencyFile]:
        return [item for item in self.files if item.kind == "stylesheet"]

    @property
    def scripts(self) -> list[DependencyFile]:
        return [item for item in self.files if item.kind == "script"]

    def evolve(self, **changes: Any) -> "Dependency":
        """Return a copy with ``changes`` applied; the original is left untouched."""
        return self.model_copy(update=changes)


def dedupe_dependencies(dependencies: list[Dependency]) -> list[Dependency]:
    """Drop repeated ``(name, version)`` pairs, keeping the first occurrence."""
    seen: set[tuple[str, str]] = set()
    unique: list[Dependency] = []
    for dependency in dependencies:
        key = (dependency.name, dependency.version)
        if key in seen:
            continue
        seen.add(key)
        unique.append(dependency)
    return unique
