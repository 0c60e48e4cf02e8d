"""CLI module for pdfgate-client."""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer
from pydantic import ValidationError

from pdfgate_client import __version__
from pdfgate_client.config import ConfigurationError, load_settings
from pdfgate_client.observability import LogLevel, configure_logging, get_logger
from pdfgate_client.pdfgate import (
    ApiError,
    CompressPdfRequest,
    ExtractPdfFormDataRequest,
    FlattenPdfRequest,
    GetDocumentRequest,
    GetFileRequest,
    OperationCancelledError,
    PdfGateClient,
    UploadFileRequest,
)


if TYPE_CHECKING:
    from collections.abc import Callable

    from pdfgate_client.pdfgate import PdfGateDocument


app = typer.Typer(
    name="pdfgate",
    help="Command-line access to the PDFGate document API.",
    no_args_is_help=True,
)

_state: dict[str, Any] = {"config_file": None}


def version_callback(value: bool) -> None:  # noqa: FBT001
    """Print version and exit."""
    if value:
        typer.echo(f"pdfgate version {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--verbose",
        "-V",
        help="Enable verbose (debug) logging.",
    ),
    quiet: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--quiet",
        "-q",
        help="Only show warnings and errors.",
    ),
    config_file: str | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file.",
    ),
) -> None:
    """pdfgate CLI."""
    del version  # Handled by callback

    if verbose and quiet:
        typer.echo("Error: --verbose and --quiet are mutually exclusive.", err=True)
        raise typer.Exit(1)

    if verbose:
        level = LogLevel.DEBUG
    elif quiet:
        level = LogLevel.WARNING
    else:
        level = LogLevel.INFO

    configure_logging(level=level)
    _state["config_file"] = config_file


def _run[T](action: Callable[[PdfGateClient], T]) -> T:
    """Build a client from settings, run one action, and map failures to exit 1."""
    log = get_logger(__name__)
    try:
        settings = load_settings(_state["config_file"])
        with PdfGateClient.from_settings(settings) as client:
            return action(client)
    except (ConfigurationError, ApiError, OperationCancelledError) as exc:
        log.debug("command_failed", error_type=type(exc).__name__)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "request"
        log.debug("command_failed", error_type=type(exc).__name__)
        typer.echo(f"Error: invalid {field}: {error['msg']}", err=True)
        raise typer.Exit(1) from exc


def _echo_document(document: PdfGateDocument) -> None:
    typer.echo(document.model_dump_json(by_alias=True, exclude_none=True, indent=2))


@app.command()
def document(
    document_id: str = typer.Argument(..., help="Document ID."),
    expires_in: int | None = typer.Option(
        None,
        "--expires-in",
        help="Lifetime of the pre-signed file URL, in seconds.",
    ),
) -> None:
    """Show the metadata of a stored document."""
    request = GetDocumentRequest(
        document_id=document_id,
        pre_signed_url_expires_in=expires_in,
    )
    _echo_document(_run(lambda client: client.get_document(request)))


@app.command()
def download(
    document_id: str = typer.Argument(..., help="Document ID."),
    output: Path = typer.Argument(..., help="File to write the PDF to."),
) -> None:
    """Download the content of a stored document."""
    request = GetFileRequest(document_id=document_id)
    content = _run(lambda client: client.get_file(request))
    with output.open("wb") as fh:
        shutil.copyfileobj(content, fh)
    typer.echo(f"Saved {output}")


@app.command()
def upload(
    path: Path | None = typer.Argument(
        None,
        exists=True,
        dir_okay=False,
        help="PDF file to upload.",
    ),
    url: str | None = typer.Option(None, "--url", help="Public URL of a PDF."),
) -> None:
    """Upload a PDF from a local file or a public URL."""
    if (path is None) == (url is None):
        typer.echo("Error: give exactly one of PATH or --url.", err=True)
        raise typer.Exit(1)

    if path is not None:
        with path.open("rb") as fh:
            request = UploadFileRequest(content=fh)
            result = _run(lambda client: client.upload_file(request))
    else:
        result = _run(
            lambda client: client.upload_file(UploadFileRequest(url=url)),
        )
    _echo_document(result)


@app.command()
def compress(
    document_id: str = typer.Argument(..., help="Document ID."),
    linearize: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--linearize",
        help="Optimize the output for fast web viewing.",
    ),
) -> None:
    """Compress a stored document."""
    request = CompressPdfRequest(document_id=document_id, linearize=linearize or None)
    _echo_document(_run(lambda client: client.compress_pdf(request)))


@app.command()
def flatten(
    document_id: str = typer.Argument(..., help="Document ID."),
) -> None:
    """Flatten the form fields of a stored document."""
    request = FlattenPdfRequest(document_id=document_id)
    _echo_document(_run(lambda client: client.flatten_pdf(request)))


@app.command()
def extract(
    document_id: str = typer.Argument(..., help="Document ID."),
) -> None:
    """Print the form field values of a stored document as JSON."""
    request = ExtractPdfFormDataRequest(document_id=document_id)
    data = _run(lambda client: client.extract_pdf_form_data(request))
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


__all__ = ["app"]
