from __future__ import annotations

from pathlib import Path, PurePosixPath, PureWindowsPath

import pytest

from pagekit.dependencies import Dependency
from pagekit.errors import PathError
from pagekit.paths import normalize_lib_dir, relativize, relativize_dependency


def test_relativize_dependency_file_below_document_directory() -> None:
    result = relativize(PurePosixPath("/out"), PurePosixPath("/out/lib/foo-1.0/foo.js"))
    assert result == "lib/foo-1.0/foo.js"


def test_relativize_walks_up_to_common_ancestor() -> None:
    assert relativize("/srv/site/pages", "/srv/site/lib/foo-1.0") == "../lib/foo-1.0"
    assert relativize("/a/b", "/c") == "../../c"


def test_relativize_same_directory_is_dot() -> None:
    assert relativize("/out", "/out") == "."


def test_relativize_windows_paths_use_forward_slashes() -> None:
    result = relativize(PureWindowsPath("C:/out"), PureWindowsPath("C:/out/lib/foo-1.0/foo.js"))
    assert result == "lib/foo-1.0/foo.js"


def test_relativize_rejects_paths_on_different_drives() -> None:
    with pytest.raises(PathError):
        relativize(PureWindowsPath("C:/out"), PureWindowsPath("D:/vendor/foo.js"))


def test_relativize_requires_absolute_paths() -> None:
    with pytest.raises(PathError):
        relativize("out", "/out/lib")
    with pytest.raises(PathError):
        relativize("/out", "lib/foo.js")


def test_relativize_does_not_depend_on_working_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    before = relativize("/out", "/out/lib/x")
    monkeypatch.chdir("/")
    assert relativize("/out", "/out/lib/x") == before == "lib/x"


@pytest.mark.parametrize("value", ["", ".", "/abs/lib", "../lib", "lib/../../x", "C:/lib"])
def test_normalize_lib_dir_rejects_paths_leaving_output(value: str) -> None:
    with pytest.raises(PathError):
        normalize_lib_dir(value)


def test_normalize_lib_dir_normalizes_separators() -> None:
    assert normalize_lib_dir("assets\\lib") == "assets/lib"
    assert normalize_lib_dir("./lib") == "lib"


def test_relativize_dependency_sets_href(tmp_path: Path) -> None:
    dependency = Dependency(
        name="foo",
        version="1.0",
        src={"file": tmp_path / "lib" / "foo-1.0"},
        script="foo.js",
    )
    relative = relativize_dependency(dependency, tmp_path)

    assert relative.src.href == "lib/foo-1.0"
    assert relative.src.file == dependency.src.file
    assert dependency.src.href is None


def test_relativize_dependency_keeps_remote_only_dependency() -> None:
    dependency = Dependency(name="cdn", version="2", src={"href": "https://cdn.example.com/cdn/"}, script="cdn.js")
    assert relativize_dependency(dependency, Path("/out")) is dependency
