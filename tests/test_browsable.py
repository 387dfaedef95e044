from __future__ import annotations

from io import StringIO
from pathlib import Path

from rich.console import Console

from pagekit.browsable import Browsable, display, is_browsable, mark_browsable, preview_in_browser
from pagekit.dependencies import Dependency
from pagekit.tags import HTML, attach_dependencies, tag


def test_mark_browsable_wraps_and_unwraps() -> None:
    content = tag("p", "hi")
    marked = mark_browsable(content)

    assert isinstance(marked, Browsable)
    assert is_browsable(marked)
    assert not is_browsable(content)
    assert mark_browsable(marked).value is content
    assert mark_browsable(marked, False) is content
    assert mark_browsable(content, False) is content


def test_preview_in_browser_saves_page_and_calls_viewer(tmp_path: Path) -> None:
    source = tmp_path / "vendor"
    source.mkdir()
    (source / "w.js").write_text("var w;", encoding="utf-8")
    widget = Dependency(name="w", version="1", src={"file": source}, script="w.js")
    opened: list[Path] = []

    index_html = preview_in_browser(attach_dependencies(tag("p", "hi"), widget), background="navy", viewer=opened.append)

    assert opened == [index_html]
    assert index_html.name == "index.html"
    assert index_html.parent.name.startswith("viewhtml")
    page = index_html.read_text(encoding="utf-8")
    assert "background-color:navy;" in page
    assert '<script src="lib/w-1/w.js"></script>' in page
    assert (index_html.parent / "lib" / "w-1" / "w.js").exists()


def test_preview_without_viewer_only_writes(tmp_path: Path) -> None:
    index_html = preview_in_browser(HTML("<p>x</p>"), viewer=None)
    assert index_html.exists()


def test_display_prints_markup_for_plain_content() -> None:
    buffer = StringIO()
    console = Console(file=buffer, width=200)
    opened: list[Path] = []

    result = display(tag("p", "[b]hi[/b]"), viewer=opened.append, console=console)

    assert result is None
    assert opened == []
    assert buffer.getvalue().strip() == "<p>[b]hi[/b]</p>"


def test_display_opens_browsable_content() -> None:
    opened: list[Path] = []
    result = display(mark_browsable(HTML("<p>x</p>")), viewer=opened.append)
    assert result is not None and opened == [result]
    assert "<p>x</p>" in result.read_text(encoding="utf-8")


def test_display_browse_override() -> None:
    buffer = StringIO()
    opened: list[Path] = []
    display(mark_browsable(HTML("<p>x</p>")), browse=False, viewer=opened.append, console=Console(file=buffer))
    assert opened == []
    assert "<p>x</p>" in buffer.getvalue()
