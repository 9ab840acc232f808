# """Command-line host layer for trialkey with structured JSON output."""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from .config import load_settings
from .engine import EntitlementEngine
from .errors import InvalidLicenseKeyError, StorageError
from .keys import derive_license_key
from .logger import setup_logging
from .models import EntitlementStatus

try:
    import trialkey_dev
except ModuleNotFoundError:  # release build: dev hooks are not packaged
    trialkey_dev = None

__version__ = "1.0.0"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _engine(ctx: typer.Context) -> EntitlementEngine:
    if isinstance(ctx.obj, EntitlementEngine):
        return ctx.obj
    return EntitlementEngine()


def _fail(message: str) -> None:
    typer.echo(f"❌ ERROR: {message}", err=True)
    raise typer.Exit(code=1)


def _render_status(status: EntitlementStatus) -> Panel:
    if status.is_licensed:
        body = "[green]Licensed[/green] – no expiry."
    elif status.trial_expired:
        body = "[red]Trial expired.[/red] Activate a license to continue."
    else:
        body = f"[yellow]Trial[/yellow] – {status.days_remaining} day(s) remaining."
    body += f"\nFirst run: {status.first_run_date:%Y-%m-%d %H:%M UTC}"
    return Panel(body, title="License status", expand=False)


def _emit(status: EntitlementStatus, pretty: bool = False) -> None:
    if pretty:
        Console().print(_render_status(status))
    else:
        print(status.model_dump_json(indent=2))


# ---------------------------------------------------------------------------
# CLI application
# ---------------------------------------------------------------------------

def version_callback(value: bool):
    if value:
        typer.echo(f"trialkey Version: {__version__}")
        raise typer.Exit()

app = typer.Typer(
    help="trialkey: offline trial and license entitlement checks.",
    context_settings={"help_option_names": ["-h", "--help"]},
    add_completion=False,
)


@app.callback()
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show the application's version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", help="YAML settings file bundled with the application."
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log engine activity to stderr."),
):
    """trialkey: offline trial and license entitlement checks."""
    if verbose:
        setup_logging(level=logging.DEBUG)
    ctx.obj = EntitlementEngine(settings=load_settings(config))


@app.command()
def status(
    ctx: typer.Context,
    data_dir: Path = typer.Argument(..., help="The application's per-user data directory."),
    pretty: bool = typer.Option(False, "--pretty", help="Human-readable panel instead of JSON."),
):
    """Report trial/license status, starting the trial on first run."""
    try:
        result = _engine(ctx).status(data_dir)
    except StorageError as exc:
        _fail(str(exc))
    _emit(result, pretty)


@app.command()
def activate(
    ctx: typer.Context,
    data_dir: Path = typer.Argument(..., help="The application's per-user data directory."),
    email: str = typer.Argument(..., help="The email used during purchase."),
    key: str = typer.Argument(..., help="Your purchased license key."),
):
    """Activate a license for *email* with *key*."""
    try:
        result = _engine(ctx).activate(data_dir, email, key)
    except (InvalidLicenseKeyError, StorageError) as exc:
        _fail(str(exc))
    typer.echo("✅ License activated. Thank you!", err=True)
    _emit(result)


# ---------------------------------------------------------------------------
# Development commands (source checkouts only)
# ---------------------------------------------------------------------------

if trialkey_dev is not None:

    @app.command()
    def keygen(email: str = typer.Argument(..., help="Buyer email address.")):
        """DEV: print the license key for *email*."""
        typer.echo(derive_license_key(email))

    @app.command()
    def expire(
        ctx: typer.Context,
        data_dir: Path = typer.Argument(..., help="The application's per-user data directory."),
    ):
        """DEV: overwrite the record with an expired trial."""
        engine = _engine(ctx)
        try:
            trialkey_dev.force_expire(data_dir, engine)
        except StorageError as exc:
            _fail(str(exc))
        typer.echo("Trial expired (dev).", err=True)

    @app.command(name="reset-trial")
    def reset_trial(
        ctx: typer.Context,
        data_dir: Path = typer.Argument(..., help="The application's per-user data directory."),
    ):
        """DEV: overwrite the record with a fresh trial."""
        engine = _engine(ctx)
        try:
            trialkey_dev.reset_trial(data_dir, engine)
        except StorageError as exc:
            _fail(str(exc))
        typer.echo("Trial reset (dev).", err=True)

    @app.command(name="activate-dev")
    def activate_dev(
        ctx: typer.Context,
        data_dir: Path = typer.Argument(..., help="The application's per-user data directory."),
    ):
        """DEV: activate with the developer email and its derived key."""
        try:
            result = trialkey_dev.activate_dev_license(data_dir, _engine(ctx))
        except (InvalidLicenseKeyError, StorageError) as exc:
            _fail(str(exc))
        _emit(result)


if __name__ == "__main__":  # pragma: no cover
    app()
