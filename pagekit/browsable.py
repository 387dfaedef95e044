"""Decide whether content is shown as markup or opened in a browser."""

from __future__ import annotations

import logging
import tempfile
import webbrowser
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Generic, TypeVar

from rich.console import Console

from .document import save_document
from .tags import RenderedTags, render_tags

logger = logging.getLogger(__name__)

T = TypeVar("T")
Viewer = Callable[[Path], Any]


@dataclass(frozen=True)
class Browsable(Generic[T]):
    """Content that should open in a browser when displayed."""

    value: T

    def render_tags(self) -> RenderedTags:
        return render_tags(self.value)


def mark_browsable(value: Any, flag: bool = True) -> Any:
    """Wrap ``value`` as browsable, or unwrap it when ``flag`` is false."""
    plain = value.value if isinstance(value, Browsable) else value
    return Browsable(plain) if flag else plain


def is_browsable(value: Any) -> bool:
    return isinstance(value, Browsable)


def open_in_browser(path: Path) -> None:
    webbrowser.open(Path(path).resolve().as_uri())


def preview_in_browser(
    content: Any,
    background: str = "white",
    viewer: Viewer | None = open_in_browser,
) -> Path:
    """Save ``content`` into a fresh temporary directory and hand the page to ``viewer``.

    Returns the path of the generated ``index.html``.
    """
    www_dir = Path(tempfile.mkdtemp(prefix="viewhtml"))
    index_html = www_dir / "index.html"
    save_document(content, index_html, background=background, lib_dir="lib")
    logger.debug("Preview page written to %s", index_html)
    if viewer is not None:
        viewer(index_html)
    return index_html


def display(
    value: Any,
    *,
    browse: bool | None = None,
    viewer: Viewer | None = open_in_browser,
    console: Console | None = None,
) -> Path | None:
    """Show ``value``: open it in a browser when browsable, otherwise print its markup.

    ``browse`` overrides the browsable flag. Returns the preview path when a
    page was generated.
    """
    should_browse = is_browsable(value) if browse is None else browse
    if should_browse:
        return preview_in_browser(value, viewer=viewer)

    rendered = render_tags(value)
    out = console or Console()
    out.print("\n".join(rendered.html), markup=False, highlight=False, soft_wrap=True)
    return None
