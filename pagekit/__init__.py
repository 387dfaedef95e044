"""pagekit: save HTML content as self-contained pages with their asset dependencies."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as load_pkg_version
from pathlib import Path
import tomllib

from .browsable import Browsable, display, is_browsable, mark_browsable, preview_in_browser
from .config import Config, SaveOptions, load_config
from .dependencies import Dependency, DependencyFile, DependencySource
from .document import Document, assemble_document, save_document, save_html
from .errors import ContentRenderError, MaterializationError, PageKitError, PathError
from .tags import HTML, RenderedTags, Renderable, attach_dependencies, head_content, render_tags, tag

__all__ = [
    "__version__",
    "Browsable",
    "Config",
    "ContentRenderError",
    "Dependency",
    "DependencyFile",
    "DependencySource",
    "Document",
    "HTML",
    "MaterializationError",
    "PageKitError",
    "PathError",
    "RenderedTags",
    "Renderable",
    "SaveOptions",
    "assemble_document",
    "attach_dependencies",
    "display",
    "head_content",
    "is_browsable",
    "load_config",
    "mark_browsable",
    "preview_in_browser",
    "render_tags",
    "save_document",
    "save_html",
    "tag",
]


def _read_local_project_version() -> str:
    """Read the project version from pyproject.toml when the package is uninstalled."""
    pyproject = Path(__file__).resolve().parent.parent / "pyproject.toml"
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return "0.0.0"
    return data.get("project", {}).get("version", "0.0.0")


try:
    __version__ = load_pkg_version("pagekit")
except PackageNotFoundError:
    __version__ = _read_local_project_version()
