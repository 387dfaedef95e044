"""A small tag model and the render step that flattens it into markup."""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape
from typing import Any, Mapping, Protocol, runtime_checkable

from .dependencies.models import Dependency, dedupe_dependencies
from .errors import ContentRenderError

VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)


class HTML(str):
    """Markup that is emitted verbatim instead of being escaped."""

    __slots__ = ()


@dataclass(frozen=True)
class RenderedTags:
    """Markup lines, head fragments and dependencies produced from a content tree."""

    html: list[str] = field(default_factory=list)
    head: list[str] = field(default_factory=list)
    dependencies: list[Dependency] = field(default_factory=list)


@runtime_checkable
class Renderable(Protocol):
    """Anything that knows how to render itself into markup."""

    def render_tags(self) -> RenderedTags: ...


@dataclass(frozen=True)
class Tag:
    """An HTML element with attributes and child content."""

    name: str
    attributes: Mapping[str, Any] = field(default_factory=dict)
    children: tuple[Any, ...] = ()


@dataclass(frozen=True)
class HeadContent:
    """Content that belongs in the document ``<head>``."""

    fragments: tuple[Any, ...] = ()


@dataclass(frozen=True)
class AttachedDependencies:
    """Content carrying the dependencies it needs to display correctly."""

    content: Any
    dependencies: tuple[Dependency, ...] = ()


def tag(name: str, *children: Any, **attributes: Any) -> Tag:
    """Build a :class:`Tag`; ``class_`` becomes ``class`` and ``data_id`` becomes ``data-id``."""
    normalized = {key.rstrip("_").replace("_", "-"): value for key, value in attributes.items()}
    return Tag(name=name, attributes=normalized, children=children)


def head_content(*fragments: Any) -> HeadContent:
    return HeadContent(fragments=fragments)


def attach_dependencies(content: Any, *dependencies: Dependency) -> AttachedDependencies:
    return AttachedDependencies(content=content, dependencies=dependencies)


def render_tags(content: Any) -> RenderedTags:
    """Flatten ``content`` into body markup lines, head fragments and dependencies.

    Dependencies are returned in first-seen order with repeated
    ``(name, version)`` pairs removed.
    """
    collector = _Collector()
    markup = collector.render(content)
    return RenderedTags(
        html=markup.split("\n") if markup else [],
        head=collector.head,
        dependencies=dedupe_dependencies(collector.dependencies),
    )


class _Collector:
    def __init__(self) -> None:
        self.head: list[str] = []
        self.dependencies: list[Dependency] = []

    def render(self, node: Any, separator: str = "\n") -> str:
        if node is None:
            return ""
        if isinstance(node, HTML):
            return str(node)
        if isinstance(node, str):
            return escape(node, quote=False)
        if isinstance(node, (int, float)):
            return escape(str(node), quote=False)
        if isinstance(node, Tag):
            return self._render_tag(node)
        if isinstance(node, HeadContent):
            for fragment in node.fragments:
                rendered = self.render(fragment)
                if rendered:
                    self.head.append(rendered)
            return ""
        if isinstance(node, AttachedDependencies):
            self.dependencies.extend(node.dependencies)
            return self.render(node.content, separator)
        if isinstance(node, Dependency):
            self.dependencies.append(node)
            return ""
        if isinstance(node, Renderable):
            rendered = node.render_tags()
            self.head.extend(rendered.head)
            self.dependencies.extend(rendered.dependencies)
            return "\n".join(rendered.html)
        if isinstance(node, (list, tuple)):
            parts = [self.render(child, separator) for child in node]
            return separator.join(part for part in parts if part)
        raise ContentRenderError(f"Cannot render object of type '{type(node).__name__}' as HTML.")

    def _render_tag(self, node: Tag) -> str:
        if not node.name or not node.name.replace("-", "").isalnum():
            raise ContentRenderError(f"Invalid tag name '{node.name}'.")
        attributes = _format_attributes(node.attributes)
        if node.name.lower() in VOID_ELEMENTS:
            if node.children:
                raise ContentRenderError(f"<{node.name}> cannot have children.")
            return f"<{node.name}{attributes}/>"
        inner = self.render(list(node.children), separator="")
        return f"<{node.name}{attributes}>{inner}</{node.name}>"


def _format_attributes(attributes: Mapping[str, Any]) -> str:
    parts: list[str] = []
    for name, value in attributes.items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(f" {escape(name, quote=True)}")
        else:
            parts.append(f' {escape(name, quote=True)}="{escape(str(value), quote=True)}"')
    return "".join(parts)
