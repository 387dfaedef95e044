"""Turn resolved dependencies into the head markup that loads them."""

from __future__ import annotations

from html import escape
from typing import Iterable, Literal, Mapping, Sequence
from urllib.parse import quote

from ..errors import MaterializationError
from .models import Dependency, DependencyFile

Strategy = Literal["href", "file"]
DEFAULT_PREFERENCE: tuple[Strategy, ...] = ("href", "file")


def render_dependencies(
    dependencies: Iterable[Dependency],
    preference: Sequence[Strategy] = DEFAULT_PREFERENCE,
) -> list[str]:
    """Return ``<link>``/``<script>`` lines for ``dependencies`` in declaration order.

    ``preference`` lists the strategies to try per dependency: ``href``
    references the files by URL, ``file`` embeds their contents read from
    disk. The first strategy the dependency supports wins.
    """
    lines: list[str] = []
    for dependency in dependencies:
        strategy = _select_strategy(dependency, preference)
        for name, content in dependency.meta.items():
            lines.append(f'<meta name="{escape(name, quote=True)}" content="{escape(content, quote=True)}">')
        for item in dependency.files:
            if strategy == "href":
                lines.append(_reference_tag(dependency, item))
            else:
                lines.append(_embedded_tag(dependency, item))
        if dependency.head:
            lines.append(dependency.head)
    return lines


def _select_strategy(dependency: Dependency, preference: Sequence[Strategy]) -> Strategy:
    for strategy in preference:
        if strategy == "href" and dependency.src.href is not None:
            return "href"
        if strategy == "file" and dependency.src.file is not None:
            return "file"
    if not dependency.files:
        # Meta tags and head markup need no file location.
        return preference[0] if preference else "href"
    raise MaterializationError(
        f"Dependency '{dependency.name}' offers none of the requested sources: {', '.join(preference)}."
    )


def _reference_tag(dependency: Dependency, item: DependencyFile) -> str:
    href = escape(_join_url(dependency.src.href or "", item.path), quote=True)
    extra = _format_attributes(item.attributes)
    if item.kind == "stylesheet":
        return f'<link rel="stylesheet" href="{href}"{extra}>'
    return f'<script src="{href}"{extra}></script>'


def _embedded_tag(dependency: Dependency, item: DependencyFile) -> str:
    if dependency.src.file is None:
        raise MaterializationError(f"Dependency '{dependency.name}' has no local files to embed.")
    path = dependency.src.file / item.path
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise MaterializationError(f"Cannot embed missing file {path} of dependency '{dependency.name}'.") from exc
    except UnicodeDecodeError as exc:
        raise MaterializationError(f"Cannot embed {path} of dependency '{dependency.name}': not UTF-8 text.") from exc
    # Keep embedded code from terminating its element early.
    content = content.replace("</", "<\\/")
    extra = _format_attributes(item.attributes)
    if item.kind == "stylesheet":
        return f"<style{extra}>{content}</style>"
    return f"<script{extra}>{content}</script>"


def _join_url(prefix: str, path: str) -> str:
    quoted = quote(path, safe="/")
    if prefix in {"", "."}:
        return quoted
    if prefix.endswith("/"):
        return f"{prefix}{quoted}"
    return f"{prefix}/{quoted}"


def _format_attributes(attributes: Mapping[str, str | bool]) -> str:
    parts: list[str] = []
    for name, value in attributes.items():
        if value is False:
            continue
        if value is True:
            parts.append(f" {escape(name, quote=True)}")
        else:
            parts.append(f' {escape(name, quote=True)}="{escape(value, quote=True)}"')
    return "".join(parts)
