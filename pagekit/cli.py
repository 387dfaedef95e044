"""CLI entrypoints for saving and previewing pages."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .browsable import open_in_browser, preview_in_browser
from .config import Config, SaveOptions, load_config
from .document import save_with_options
from .errors import PageKitError
from .page import Page, load_page
from .verify import VerificationReport, verify_site

console = Console()
app = typer.Typer(help="Render HTML pages together with their asset dependencies.")

ConfigPathOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to a pagekit.yml file or the directory holding it."),
]
BackgroundOption = Annotated[
    str | None,
    typer.Option("--background", "-b", help="Page background color."),
]
PageArgument = Annotated[
    Path,
    typer.Argument(..., help="YAML page manifest describing body, head and dependencies."),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log dependency copies and saved files."),
    ] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()
def save(
    page_path: PageArgument,
    output: Annotated[
        Path,
        typer.Argument(..., help="Destination file, or an existing directory to hold index.html."),
    ],
    config_path: ConfigPathOption = None,
    background: BackgroundOption = None,
    lib_dir: Annotated[
        str | None,
        typer.Option("--lib-dir", help="Directory (relative to the page) for dependency files."),
    ] = None,
    lang: Annotated[
        str | None,
        typer.Option("--lang", help="Value of the <html> lang attribute."),
    ] = None,
    overwrite: Annotated[
        bool,
        typer.Option("--overwrite", help="Replace dependencies already present in another version."),
    ] = False,
) -> None:
    """Save a page and copy its dependencies next to it."""
    config = _load(config_path)
    overrides = {
        key: value
        for key, value in {"background": background, "lib_dir": lib_dir, "lang": lang}.items()
        if value is not None
    }
    if overwrite:
        overrides["overwrite"] = True
    try:
        options = SaveOptions.model_validate({**config.save.model_dump(), **overrides})
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    target = output / options.filename if output.is_dir() else output
    page = _load_page(page_path)
    try:
        save_with_options(page, target, options)
    except (PageKitError, OSError) as exc:
        console.print(f"[bold red]Save failed[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    console.print(
        f"[bold green]Saved[/]: {target} with {len(page.dependencies)} dependency bundle(s) "
        f"in '{options.lib_dir}'."
    )


@app.command()
def preview(
    page_path: PageArgument,
    config_path: ConfigPathOption = None,
    background: BackgroundOption = None,
    open_browser: Annotated[
        bool | None,
        typer.Option(
            "--open-browser/--no-open-browser",
            help="Open the generated page in the system browser.",
        ),
    ] = None,
) -> None:
    """Build a page in a temporary directory and open it in a browser."""
    config = _load(config_path)
    should_open = config.preview.open_browser if open_browser is None else open_browser
    page = _load_page(page_path)
    try:
        index_html = preview_in_browser(
            page,
            background=background or config.preview.background,
            viewer=open_in_browser if should_open else None,
        )
    except (PageKitError, OSError) as exc:
        console.print(f"[bold red]Preview failed[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    console.print(f"[bold green]Preview ready[/]: {index_html}")


@app.command()
def verify(
    directory: Annotated[
        Path,
        typer.Argument(..., help="Directory containing saved pages."),
    ],
) -> None:
    """Check that every local href/src in saved pages resolves."""
    if not directory.is_dir():
        console.print(f"[bold red]Directory not found[/]: {directory}")
        raise typer.Exit(code=1)
    report = verify_site(directory)
    _print_verification_report(report)
    raise typer.Exit(code=1 if report.error_count else 0)


def _print_verification_report(report: VerificationReport) -> None:
    if not report.issues:
        console.print(f"[bold green]Verification passed[/]: {report.scanned_files} page(s) checked.")
        return
    console.print(
        f"[bold red]Verification failed[/]: {report.error_count} issue(s) "
        f"across {report.scanned_files} page(s)."
    )
    for issue in report.issues:
        console.print(f"- [red]{issue.kind}[/] {issue.source} :: {escape(issue.message)}")


def _load(path: Path | None) -> Config:
    try:
        return load_config(path if path is not None else Path.cwd())
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Config file not found: {path}") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _load_page(path: Path) -> Page:
    try:
        return load_page(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Page manifest not found: {path}") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
