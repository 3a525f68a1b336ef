"""
Command-line interface — ``cert-status status certificate NAME``.

Typer application. Exit codes:
  0  a report was printed, even if some related lookups failed
  1  structural failure: bad configuration, no client, Certificate missing
     or malformed
  2  usage error (missing or extra NAME argument, unknown option)
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn, Optional

import structlog
import typer
from pydantic import ValidationError

from cert_status import __version__
from cert_status.config import AppSettings
from cert_status.domain.outcome import Failed, Present
from cert_status.main import (
    configure_structlog,
    create_object_store,
    resolve_namespace,
    settings_with_overrides,
)
from cert_status.pipeline import gather_status
from cert_status.rendering import render

app = typer.Typer(
    name="cert-status",
    help="Report the status of cert-manager resources.",
    no_args_is_help=True,
    add_completion=False,
)
status_app = typer.Typer(
    help="Get details about the current status of a cert-manager resource.",
    no_args_is_help=True,
)
app.add_typer(status_app, name="status")

EXAMPLE = """\
Example:

  # Query status of Certificate with name 'my-crt' in namespace 'my-namespace'

  cert-status status certificate my-crt --namespace my-namespace
"""


def _fail(message: str) -> NoReturn:
    typer.secho(f"error: {message}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"cert-status {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Report the status of cert-manager resources."""


@status_app.command(
    name="certificate",
    help=(
        "Get details about the current status of a cert-manager Certificate "
        "resource, including information on related resources like "
        "CertificateRequest.\n\n" + EXAMPLE
    ),
)
def certificate_cmd(
    name: str = typer.Argument(..., help="Name of the Certificate."),
    namespace: Optional[str] = typer.Option(
        None, "--namespace", "-n", help="Namespace of the Certificate."
    ),
    kubeconfig: Optional[Path] = typer.Option(
        None, "--kubeconfig", help="Path to the kubeconfig file to use."
    ),
    context: Optional[str] = typer.Option(
        None, "--context", help="Name of the kubeconfig context to use."
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Log level for diagnostics on stderr."
    ),
) -> None:
    try:
        settings = AppSettings()
    except ValidationError as e:
        _fail(f"invalid configuration: {e}")

    configure_structlog(log_level or settings.log_level)
    log = structlog.get_logger()
    settings = settings_with_overrides(settings, kubeconfig=kubeconfig, context=context)
    ns = resolve_namespace(settings, namespace)
    log.debug("cli.status_certificate", name=name, namespace=ns)

    match create_object_store(settings):
        case Failed(reason):
            _fail(reason.describe())
        case Present(store):
            outcome = gather_status(store, ns, name)

    match outcome:
        case Failed(reason):
            _fail(reason.message)
        case Present(snapshot):
            typer.echo(render(snapshot), nl=False)


def main() -> None:
    """Console-script entry point."""
    app()


if __name__ == "__main__":
    main()
