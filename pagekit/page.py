"""Pages described by YAML manifests, for saving from the command line."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .dependencies import Dependency, dedupe_dependencies
from .tags import RenderedTags


class Page(BaseModel):
    """Body markup, head fragments and dependencies of a single page."""

    body: str = Field(default="", description="Raw body markup.")
    head: list[str] = Field(default_factory=list)
    dependencies: list[Dependency] = Field(default_factory=list)

    @field_validator("head", mode="before")
    def _ensure_list(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return list(value)

    def render_tags(self) -> RenderedTags:
        body = self.body.rstrip("\n")
        return RenderedTags(
            html=body.split("\n") if body else [],
            head=list(self.head),
            dependencies=dedupe_dependencies(list(self.dependencies)),
        )


class _PageManifest(Page):
    body_file: Path | None = Field(default=None)

    @model_validator(mode="after")
    def _single_body_source(self) -> "_PageManifest":
        if self.body and self.body_file is not None:
            raise ValueError("Use either 'body' or 'body_file', not both.")
        return self


def load_page(path: str | Path) -> Page:
    """Load a page manifest; relative paths are resolved against its directory."""
    manifest_path = Path(path)
    with manifest_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Page manifest {manifest_path} must contain a mapping.")

    manifest = _PageManifest(**data)
    base_dir = manifest_path.parent.resolve()

    body = manifest.body
    if manifest.body_file is not None:
        body_path = _anchor(manifest.body_file, base_dir)
        body = body_path.read_text(encoding="utf-8")

    dependencies = []
    for dependency in manifest.dependencies:
        source_dir = dependency.src.file
        if source_dir is not None and not source_dir.is_absolute():
            dependency = dependency.evolve(
                src=dependency.src.model_copy(update={"file": _anchor(source_dir, base_dir)})
            )
        dependencies.append(dependency)

    return Page(body=body, head=manifest.head, dependencies=dependencies)


def _anchor(value: Path, base_dir: Path) -> Path:
    return value if value.is_absolute() else (base_dir / value).resolve()
