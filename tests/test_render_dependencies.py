from __future__ import annotations

from pathlib import Path

import pytest

from pagekit.dependencies import Dependency, DependencyFile, render_dependencies
from pagekit.errors import MaterializationError


def _local(name: str, source: Path, files: list[DependencyFile], href: str | None = None) -> Dependency:
    return Dependency(name=name, version="1.0", src={"file": source, "href": href}, files=files)


def test_tags_follow_declaration_order_across_dependencies(tmp_path: Path) -> None:
    a = _local(
        "a",
        tmp_path,
        [DependencyFile(kind="stylesheet", path="a1.css"), DependencyFile(kind="script", path="a1.js")],
        href="lib/a-1.0",
    )
    b = _local("b", tmp_path, [DependencyFile(kind="stylesheet", path="b1.css")], href="lib/b-1.0")

    lines = render_dependencies([a, b])

    assert lines == [
        '<link rel="stylesheet" href="lib/a-1.0/a1.css">',
        '<script src="lib/a-1.0/a1.js"></script>',
        '<link rel="stylesheet" href="lib/b-1.0/b1.css">',
    ]


def test_script_before_stylesheet_keeps_declared_order() -> None:
    dependency = Dependency(
        name="mixed",
        version="1",
        src={"href": "https://cdn.example.com/mixed"},
        files=[
            {"kind": "script", "path": "boot.js"},
            {"kind": "stylesheet", "path": "theme.css"},
        ],
    )
    lines = render_dependencies([dependency])
    assert lines[0].startswith("<script")
    assert lines[1].startswith("<link")


def test_file_strategy_embeds_content(tmp_path: Path) -> None:
    (tmp_path / "style.css").write_text("p { color: red; }", encoding="utf-8")
    (tmp_path / "app.js").write_text("console.log('</script>');", encoding="utf-8")
    dependency = Dependency(name="inline", version="1", src={"file": tmp_path}, stylesheet="style.css", script="app.js")

    lines = render_dependencies([dependency], ["file"])

    assert lines == [
        "<style>p { color: red; }</style>",
        "<script>console.log('<\\/script>');</script>",
    ]


def test_href_preferred_over_file_when_both_available(tmp_path: Path) -> None:
    dependency = _local("x", tmp_path, [DependencyFile(kind="script", path="x.js")], href="lib/x-1.0")
    assert render_dependencies([dependency], ["href", "file"]) == ['<script src="lib/x-1.0/x.js"></script>']


def test_falls_back_to_file_without_href(tmp_path: Path) -> None:
    (tmp_path / "x.js").write_text("var x = 1;", encoding="utf-8")
    dependency = _local("x", tmp_path, [DependencyFile(kind="script", path="x.js")])
    assert render_dependencies([dependency], ["href", "file"]) == ["<script>var x = 1;</script>"]


def test_no_usable_strategy_raises() -> None:
    dependency = Dependency(name="remote", version="1", src={"href": "https://example.com"}, script="r.js")
    with pytest.raises(MaterializationError):
        render_dependencies([dependency], ["file"])


def test_attribute_values_are_escaped() -> None:
    dependency = Dependency(
        name="evil",
        version="1",
        src={"href": 'https://example.com/"><script>'},
        files=[{"kind": "script", "path": "x.js", "attributes": {"data-note": 'a"b<c>&', "defer": True, "async": False}}],
        meta={"description": '"quoted" <meta>'},
    )

    lines = render_dependencies([dependency])

    assert lines[0] == '<meta name="description" content="&quot;quoted&quot; &lt;meta&gt;">'
    assert '"><script>' not in lines[1]
    assert "&quot;&gt;&lt;script&gt;" in lines[1]
    assert 'data-note="a&quot;b&lt;c&gt;&amp;"' in lines[1]
    assert lines[1].endswith(" defer></script>")
    assert "async" not in lines[1]


def test_paths_are_url_quoted() -> None:
    dependency = Dependency(name="sp", version="1", src={"href": "lib/sp-1"}, stylesheet="my styles/main.css")
    assert render_dependencies([dependency]) == ['<link rel="stylesheet" href="lib/sp-1/my%20styles/main.css">']


def test_dependency_head_markup_follows_files() -> None:
    dependency = Dependency(
        name="h",
        version="1",
        src={"href": "lib/h-1"},
        script="h.js",
        head="<base target='_blank'>",
    )
    assert render_dependencies([dependency])[-1] == "<base target='_blank'>"


def test_embedding_non_utf8_file_raises(tmp_path: Path) -> None:
    (tmp_path / "latin.js").write_bytes(b"var s = '\xe9';")
    dependency = Dependency(name="latin", version="1", src={"file": tmp_path}, script="latin.js")

    with pytest.raises(MaterializationError, match="latin.js"):
        render_dependencies([dependency], ["file"])
