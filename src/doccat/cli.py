"""Command line interface for doccat."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from doccat.catalog.codec import encode
from doccat.catalog.loader import load_catalog
from doccat.classify.summary import summarize
from doccat.config import DEFAULT_EXTENSIONS, AppConfig
from doccat.distributed.runner import configure_worker_logging, run_local, run_mpi, run_sequential
from doccat.distributed.transport import TransportError
from doccat.errors import CatalogCodecError, DocCatError
from doccat.output.sink import display_name, read_results


console = Console()
app = typer.Typer(help="doccat - classify documents against a keyword catalog")

_DEFAULTS = AppConfig()


def _setup_logging(verbose: bool, rank: int = 0) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    if rank:
        configure_worker_logging(rank, level)
        return
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _build_config(
    catalog: Path,
    input_dir: Path,
    output: Path,
    workers: int,
    extensions: Optional[List[str]],
    recursive: bool,
    append: bool,
) -> AppConfig:
    try:
        config = AppConfig(
            catalog_path=catalog,
            input_dir=input_dir,
            output_path=output,
            workers=workers,
            extensions=tuple(extensions) if extensions else DEFAULT_EXTENSIONS,
            recursive=recursive,
            append=append,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return config.resolve(Path.cwd())


def _fail(exc: DocCatError) -> NoReturn:
    console.print(f"[red]{escape(exc.describe())}[/red]")
    raise typer.Exit(code=1)


def _print_summary(summary: Dict[str, Optional[str]]) -> None:
    if not summary:
        console.print("[yellow]No documents classified.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Document")
    table.add_column("Dominant topic")
    for document, topic in summary.items():
        table.add_row(escape(display_name(document)), escape(topic or "-"))
    console.print(table)


CatalogOption = typer.Option(_DEFAULTS.catalog_path, "--catalog", help="Catalog source file")
InputOption = typer.Option(_DEFAULTS.input_dir, "--input", help="Directory with documents")
OutputOption = typer.Option(_DEFAULTS.output_path, "--output", help="Result file shared by workers")
ExtOption = typer.Option(
    None, "--ext", help="Allowed document extension (repeatable, default: .html .txt .tex)"
)
RecursiveOption = typer.Option(False, "--recursive", help="Descend into subdirectories")
AppendOption = typer.Option(False, "--append", help="Append to the result file instead of truncating it")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Verbose logging")


@app.command()
def classify(
    catalog: Path = CatalogOption,
    input_dir: Path = InputOption,
    output: Path = OutputOption,
    workers: int = typer.Option(_DEFAULTS.workers, "--workers", "-w", help="Worker processes"),
    extensions: Optional[List[str]] = ExtOption,
    recursive: bool = RecursiveOption,
    append: bool = AppendOption,
    summary: bool = typer.Option(False, "--summary", help="Print the dominant topic per document"),
    verbose: bool = VerboseOption,
) -> None:
    """Classify documents with a pool of local worker processes."""
    _setup_logging(verbose)
    config = _build_config(catalog, input_dir, output, workers, extensions, recursive, append)

    try:
        report = run_local(config)
    except DocCatError as exc:
        _fail(exc)

    console.print(
        f"Classified {report.documents} documents with {report.workers} workers "
        f"in {report.elapsed:.3f}s -> [bold]{config.output_path}[/bold]"
    )
    if summary:
        try:
            parsed = read_results(config.output_path)
        except ValueError as exc:
            console.print(f"[red]{escape(str(exc))}[/red]")
            raise typer.Exit(code=1)
        _print_summary(summarize(parsed))


@app.command()
def sequential(
    catalog: Path = CatalogOption,
    input_dir: Path = InputOption,
    output: Path = OutputOption,
    extensions: Optional[List[str]] = ExtOption,
    recursive: bool = RecursiveOption,
    append: bool = AppendOption,
    verbose: bool = VerboseOption,
) -> None:
    """Classify documents in this process and show dominant topics."""
    _setup_logging(verbose)
    config = _build_config(catalog, input_dir, output, 1, extensions, recursive, append)

    try:
        report = run_sequential(config)
    except DocCatError as exc:
        _fail(exc)

    if report.skipped:
        console.print(f"[yellow]Skipped {len(report.skipped)} unreadable documents.[/yellow]")
    _print_summary(report.summary)


@app.command()
def mpi(
    catalog: Path = CatalogOption,
    input_dir: Path = InputOption,
    output: Path = OutputOption,
    extensions: Optional[List[str]] = ExtOption,
    recursive: bool = RecursiveOption,
    append: bool = AppendOption,
    verbose: bool = VerboseOption,
) -> None:
    """Run one rank of an MPI job (launch with mpirun -n K doccat mpi)."""
    try:
        from doccat.distributed.mpi import MPITransport

        transport = MPITransport()
    except ImportError as exc:
        raise typer.BadParameter(
            "mpi4py is not installed. Install the MPI extras with \"python -m pip install '.[mpi]'\""
        ) from exc
    except TransportError as exc:
        raise typer.BadParameter(str(exc)) from exc

    _setup_logging(verbose, transport.rank)
    # The worker count comes from the MPI world size.
    config = _build_config(
        catalog, input_dir, output, max(transport.size - 1, 1), extensions, recursive, append
    )
    try:
        report = run_mpi(config, transport)
    except DocCatError as exc:
        _fail(exc)

    if transport.rank == 0:
        console.print(
            f"Classified {report.documents} documents with {report.workers} workers "
            f"in {report.elapsed:.3f}s"
        )


@app.command(name="summarize")
def summarize_results(
    results: Path = typer.Argument(..., help="Result file written by classify"),
) -> None:
    """Show the dominant topic of every document in a result file."""
    if not results.exists():
        raise typer.BadParameter(f"Result file not found: {results}")
    try:
        parsed = read_results(results)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    _print_summary(summarize(parsed))


@app.command(name="encode")
def encode_catalog(
    catalog: Path = typer.Argument(..., help="Catalog source file"),
) -> None:
    """Print the wire encoding of a catalog."""
    try:
        payload = encode(load_catalog(catalog))
    except DocCatError as exc:
        _fail(exc)
    except CatalogCodecError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)
    typer.echo(payload.decode("utf-8"))
