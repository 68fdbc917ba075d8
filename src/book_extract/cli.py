"""Main CLI application."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from book_extract.core.metadata import extract_metadata
from book_extract.core.parser_factory import ParserFactory, extract_content
from book_extract.models import BookFormat, ExtractionSettings

app = typer.Typer(
    name="book-extract",
    help="Extract chapters, paragraphs and metadata from EPUB and comic archives.",
    add_completion=False,
)

console = Console()
# Diagnostics go to stderr so stdout stays valid JSON
err_console = Console(stderr=True)


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """Extract chapters, paragraphs and metadata from EPUB and comic archives."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


BookPathArg = Annotated[
    Path,
    typer.Argument(
        help="Path to the book file (EPUB, CBZ, CBR or PDF)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
]


def _resolve_format(book_path: Path, format_tag: str | None) -> str | BookFormat:
    if format_tag:
        return format_tag
    book_format = ParserFactory.detect_format(book_path)
    if book_format is BookFormat.UNKNOWN:
        # Keep the raw extension so the stub names it
        return book_path.suffix.lstrip(".").upper() or book_path.name
    return book_format


@app.command()
def content(
    book_path: BookPathArg,
    format_tag: Annotated[
        Optional[str],
        typer.Option(
            "--format",
            "-f",
            help="Format tag: EPUB, CBZ, CBR or PDF (default: from extension)",
        ),
    ] = None,
    pages_per_chapter: Annotated[
        int,
        typer.Option(
            "--pages-per-chapter",
            help="Pages per chapter for comic archives",
            min=1,
        ),
    ] = 20,
    pretty: Annotated[
        bool,
        typer.Option("--pretty", help="Indent the JSON output"),
    ] = False,
) -> None:
    """Print the book's chapters and paragraphs as JSON."""
    settings = ExtractionSettings(pages_per_chapter=pages_per_chapter)
    try:
        book = extract_content(book_path, _resolve_format(book_path, format_tag), settings)
    except Exception as e:
        err_console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)

    typer.echo(book.to_json(indent=2 if pretty else None))


@app.command()
def metadata(
    book_path: BookPathArg,
    pretty: Annotated[
        bool,
        typer.Option("--pretty", help="Indent the JSON output"),
    ] = False,
) -> None:
    """Print title, author and cover as JSON."""
    try:
        meta = extract_metadata(book_path)
    except Exception as e:
        err_console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)

    typer.echo(meta.to_json(indent=2 if pretty else None))


@app.command()
def info(book_path: BookPathArg) -> None:
    """Display book metadata and chapter overview."""
    try:
        meta = extract_metadata(book_path)
        book = extract_content(book_path, _resolve_format(book_path, None))
    except Exception as e:
        err_console.print(f"[red]Error reading file: {e}[/]")
        raise typer.Exit(1)

    info_lines = [
        f"[bold]{meta.title}[/]",
        "",
        f"[dim]Author:[/] {meta.author}",
        f"[dim]Format:[/] {ParserFactory.detect_format(book_path).value.upper()}",
        f"[dim]Cover:[/] {meta.cover_source.value.replace('_', ' ')}",
        f"[dim]Status:[/] {book.status.value}",
        f"[dim]Chapters:[/] {len(book.chapters)}",
    ]
    if book.failure is not None:
        info_lines.append(f"[yellow]Failure: {book.failure.value.replace('_', ' ')}[/]")
    if book.font_family or book.font_size_px:
        info_lines.append(
            f"[dim]Font:[/] {book.font_family or 'default'}"
            f"{f' {book.font_size_px:g}px' if book.font_size_px else ''}"
        )

    console.print()
    console.print(
        Panel("\n".join(info_lines), title="Book Information", border_style="green")
    )

    console.print()
    table = Table(title="Chapters", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", style="white")
    table.add_column("Paragraphs", justify="right", style="green")
    table.add_column("Title From", style="dim")
    table.add_column("Split By", style="dim")

    for index, chapter in enumerate(book.chapters, start=1):
        table.add_row(
            str(index),
            chapter.title,
            f"{len(chapter.paragraphs):,}",
            chapter.title_source.value.replace("_", " "),
            chapter.segmentation.value.replace("_", " ") if chapter.segmentation else "—",
        )

    console.print(table)
    console.print()


if __name__ == "__main__":
    app()
