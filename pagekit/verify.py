"""Check that saved pages only reference files that exist next to them."""

from __future__ import annotations

from dataclasses import dataclass, field
from html.parser import HTMLParser
from pathlib import Path
from typing import List, Tuple
from urllib.parse import unquote, urlsplit

_SRC_TAGS = {"script", "img", "iframe", "audio", "video", "source", "track", "embed"}
_IGNORED_SCHEMES = {"http", "https", "mailto", "tel", "data", "javascript", "ftp", "file"}


@dataclass(slots=True)
class VerificationIssue:
    """A reference in a saved page that does not resolve."""

    kind: str
    source: Path
    target: str
    message: str


@dataclass(slots=True)
class VerificationReport:
    scanned_files: int
    issues: list[VerificationIssue] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.issues)


class _ReferenceCollector(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.references: list[tuple[str, str]] = []

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, str | None]]) -> None:
        attr_map = {name: value for name, value in attrs if value is not None}
        if tag in {"a", "link"} and attr_map.get("href"):
            self.references.append((tag, attr_map["href"]))
        if tag in _SRC_TAGS and attr_map.get("src"):
            self.references.append((tag, attr_map["src"]))


def verify_site(output_dir: Path) -> VerificationReport:
    """Scan every ``*.html`` file below ``output_dir`` for unresolved local references."""
    output_dir = Path(output_dir).resolve()
    html_files = sorted(output_dir.rglob("*.html"))
    issues: list[VerificationIssue] = []

    for html_file in html_files:
        parser = _ReferenceCollector()
        parser.feed(html_file.read_text(encoding="utf-8"))

        for tag, reference in parser.references:
            path = _local_path(reference)
            if path is None:
                continue
            if path.startswith("/"):
                candidate = (output_dir / path.lstrip("/")).resolve()
            else:
                candidate = (html_file.parent / path).resolve()

            if not candidate.is_relative_to(output_dir):
                issues.append(
                    VerificationIssue(
                        kind="out-of-bounds",
                        source=html_file,
                        target=reference,
                        message=f"Reference points outside {output_dir}: '{reference}'",
                    )
                )
                continue
            if candidate.exists():
                continue
            issues.append(
                VerificationIssue(
                    kind=_classify_issue(tag),
                    source=html_file,
                    target=reference,
                    message=f"Missing target for <{tag}> '{reference}'",
                )
            )

    return VerificationReport(scanned_files=len(html_files), issues=issues)


def _local_path(reference: str) -> str | None:
    stripped = reference.strip()
    if not stripped:
        return None
    parsed = urlsplit(stripped)
    if parsed.scheme in _IGNORED_SCHEMES or parsed.netloc:
        return None
    path = unquote(parsed.path or "")
    return path or None


def _classify_issue(tag: str) -> str:
    if tag in {"link", "script"}:
        return "missing-dependency"
    if tag == "a":
        return "missing-page"
    return "missing-asset"
