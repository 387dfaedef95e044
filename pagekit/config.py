from pathlib import Path, PurePath
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from .errors import PathError
from .paths import normalize_lib_dir

CONFIG_FILENAME = "pagekit.yml"


class SaveOptions(BaseModel):
    """Options controlling how a page and its dependencies are written."""

    background: str = Field(default="white", description="CSS background color of the page body.")
    lib_dir: str = Field(
        default="lib",
        description="Directory (relative to the page) that receives dependency files.",
    )
    lang: str = Field(default="en", description="Value of the <html> lang attribute.")
    filename: str = Field(default="index.html", description="File name used when saving into a directory.")
    overwrite: bool = Field(
        default=False,
        description="Replace a dependency already present under the same name with a different version.",
    )
    preference: list[Literal["href", "file"]] = Field(
        default_factory=lambda: ["href", "file"],
        description="Order in which dependency reference strategies are tried.",
    )

    @field_validator("lib_dir", mode="before")
    def _ensure_relative_lib_dir(cls, value: Any) -> str:
        try:
            return normalize_lib_dir(str(value))
        except PathError as exc:
            raise ValueError(str(exc)) from None

    @field_validator("lang")
    def _ensure_lang(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("The document language must not be empty.")
        return text

    @field_validator("filename")
    def _ensure_bare_filename(cls, value: str) -> str:
        text = value.strip()
        if not text or PurePath(text).name != text or text in {".", ".."}:
            raise ValueError(f"'{value}' must be a plain file name.")
        return text

    @field_validator("preference")
    def _ensure_unique_preference(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("At least one dependency reference strategy is required.")
        if len(set(value)) != len(value):
            raise ValueError("Dependency reference strategies must not repeat.")
        return value


class PreviewOptions(BaseModel):
    """Options for previewing a page in a browser."""

    background: str = Field(default="white")
    open_browser: bool = Field(
        default=True,
        description="Open the generated page with the system browser.",
    )


class Config(BaseModel):
    save: SaveOptions = Field(default_factory=SaveOptions)
    preview: PreviewOptions = Field(default_factory=PreviewOptions)


def load_config(path: str | Path) -> Config:
    """Load configuration from a YAML file.

    ``path`` may point to a file or to a directory expected to contain
    ``pagekit.yml``. A directory without that file yields the defaults, while
    an explicit file path that does not exist raises ``FileNotFoundError``.
    """
    candidate = Path(path)
    data: dict[str, Any] = {}
    if candidate.is_dir():
        config_file = candidate / CONFIG_FILENAME
        if config_file.exists():
            data = _read_yaml(config_file)
    elif candidate.exists():
        data = _read_yaml(candidate)
    else:
        raise FileNotFoundError(candidate)
    return Config(**data)


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping.")
    return data
