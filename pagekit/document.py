"""Assemble complete HTML documents and save them next to their dependencies."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import singledispatch
from html import escape
from pathlib import Path
from typing import Any, BinaryIO, Sequence

from .config import SaveOptions
from .dependencies import DependencyMaterializer, render_dependencies
from .errors import PathError
from .paths import relativize_dependency
from .staging import write_atomic
from .tags import render_tags

logger = logging.getLogger(__name__)

_BODY_OPEN = re.compile(r"<body\b", re.IGNORECASE)


@dataclass(frozen=True)
class Document:
    """An assembled page as an ordered list of lines."""

    lines: list[str] = field(default_factory=list)

    def text(self) -> str:
        return "".join(f"{line}\n" for line in self.lines)

    def encode(self) -> bytes:
        return self.text().encode("utf-8")


def assemble_document(content: Any, base_dir: Path, options: SaveOptions | None = None) -> Document:
    """Render ``content`` into a full document whose dependencies live under ``base_dir``.

    Dependencies are copied into ``base_dir/options.lib_dir`` and referenced
    relative to ``base_dir``. Nothing but dependency files is written.
    """
    options = options or SaveOptions()
    base_dir = Path(base_dir)
    if not base_dir.is_dir():
        raise PathError(f"Output directory '{base_dir}' does not exist.")
    base_dir = base_dir.resolve()

    rendered = render_tags(content)

    materializer = DependencyMaterializer(base_dir, options.lib_dir, overwrite=options.overwrite)
    located = [materializer.materialize(dependency) for dependency in rendered.dependencies]
    dependencies = [
        relativize_dependency(dependency, base_dir)
        for dependency in located
        if materializer.is_current(dependency)
    ]

    wrap_body = not (rendered.html and _BODY_OPEN.match(rendered.html[0].lstrip()))

    lines = [
        "<!DOCTYPE html>",
        f'<html lang="{escape(options.lang, quote=True)}">',
        "<head>",
        '<meta charset="utf-8">',
        f"<style>body{{background-color:{escape(options.background, quote=True)};}}</style>",
        *render_dependencies(dependencies, options.preference),
        *rendered.head,
        "</head>",
    ]
    if wrap_body:
        lines.append("<body>")
    lines.extend(rendered.html)
    if wrap_body:
        lines.append("</body>")
    lines.append("</html>")
    return Document(lines=lines)


def save_document(
    content: Any,
    destination: str | Path | BinaryIO,
    *,
    background: str = "white",
    lib_dir: str = "lib",
    lang: str = "en",
    overwrite: bool = False,
    preference: Sequence[str] = ("href", "file"),
    base_dir: Path | None = None,
) -> None:
    """Write ``content`` as a complete page, copying its dependencies alongside it.

    ``destination`` is a file path (its directory must already exist) or a
    binary stream. For streams, dependencies are placed under ``base_dir``,
    which defaults to the current working directory.
    """
    options = SaveOptions(
        background=background,
        lib_dir=lib_dir,
        lang=lang,
        overwrite=overwrite,
        preference=list(preference),
    )
    save_with_options(content, destination, options, base_dir=base_dir)


def save_with_options(
    content: Any,
    destination: str | Path | BinaryIO,
    options: SaveOptions,
    *,
    base_dir: Path | None = None,
) -> None:
    if isinstance(destination, (str, Path)):
        target = Path(destination)
        if not target.parent.is_dir():
            raise PathError(f"Directory '{target.parent}' does not exist; create it before saving.")
        target = target.parent.resolve() / target.name
        document = assemble_document(content, target.parent, options)
        write_atomic(target, document.encode())
        logger.info("Saved %s with %d line(s).", target, len(document.lines))
        return

    document = assemble_document(content, base_dir or Path.cwd(), options)
    destination.write(document.encode())


@singledispatch
def save_html(content: Any, destination: str | Path | BinaryIO, **options: Any) -> None:
    """Save ``content`` as an HTML page.

    Content types may register their own implementation with
    ``@save_html.register``; everything else goes through :func:`save_document`.
    """
    save_document(content, destination, **options)
