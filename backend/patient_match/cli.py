"""Typer CLI for patient-match.

Commands
--------
- ``patient-match init``   -- interactive first-time setup
- ``patient-match start``  -- launch the FastAPI server
- ``patient-match status`` -- display current runtime / configuration status
- ``patient-match check``  -- run the minimum-criteria gate on a local file
"""

from __future__ import annotations

import secrets
import socket
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from patient_match.audit import AuditLog
from patient_match.codec import WireFormat, decode_patient
from patient_match.config import (
    DEFAULT_PORT,
    ENV_PREFIX,
    get_base_dir,
    load_settings,
    reload_env,
)
from patient_match.errors import ConfigurationError, MalformedInputError
from patient_match.matching import classify, extract, score, validate
from patient_match.storage.filesystem import ensure_directories, get_env_path

app = typer.Typer(
    name="patient-match",
    help="IDI Patient/$match minimum-criteria service",
    add_completion=False,
)
console = Console()

EXIT_ACCEPTED = 0
EXIT_REJECTED = 1
EXIT_MALFORMED = 2

SIGNAL_LABELS: dict[str, str] = {
    "has_passport": "Passport number (PPN)",
    "has_drivers_license": "Driver's license (DL)",
    "has_qualifying_address": "Home address with line and city",
    "has_other_identifier": "Other coded identifier",
    "has_phone": "Phone",
    "has_email": "Email",
    "has_photo": "Photo",
    "has_full_name": "Given and family name",
    "has_birth_date": "Birth date",
    "has_qualifying_contact": "Contact with name/telecom/address/organization",
}


def _is_port_in_use(port: int) -> bool:
    """Return True if *port* on localhost is currently accepting connections."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.settimeout(1)
        return sock.connect_ex(("127.0.0.1", port)) == 0


def _write_env_file(path: Path, token: str, port: int, auth_enabled: bool) -> None:
    """Write a minimal .env file for patient-match."""
    lines = [
        "# patient-match configuration",
        f"{ENV_PREFIX}ACCESS_TOKENS={token}",
        f"{ENV_PREFIX}AUTH_ENABLED={'true' if auth_enabled else 'false'}",
        f"{ENV_PREFIX}PORT={port}",
        "",
    ]
    path.write_text("\n".join(lines), encoding="utf-8")


def _load_settings_or_exit():
    try:
        return load_settings()
    except ConfigurationError as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=1)


@app.command()
def init() -> None:
    """Create the ~/.patient-match/ directory structure and write initial config."""

    console.print(Panel("[bold cyan]patient-match[/bold cyan] -- first-time setup"))

    base = get_base_dir()

    # 1. Create directories ------------------------------------------------
    console.print("\n[bold]1.[/bold] Creating directory structure ...")
    ensure_directories()
    console.print(f"   [green]✓[/green] {base / 'audit'}")

    # 2. Access token --------------------------------------------------------
    console.print()
    auth_enabled = Confirm.ask("[bold]2.[/bold] Require a bearer token on $match?", default=True)
    token = secrets.token_urlsafe(32)

    # 3. Port ---------------------------------------------------------------
    port_str = Prompt.ask("[bold]3.[/bold] Server port", default=str(DEFAULT_PORT))
    try:
        port = int(port_str)
    except ValueError:
        console.print(f"[red]Invalid port: {port_str}. Using default {DEFAULT_PORT}.[/red]")
        port = DEFAULT_PORT

    # 4. Write .env ---------------------------------------------------------
    env_path = get_env_path()
    _write_env_file(env_path, token, port, auth_enabled)
    console.print(f"\n   [green]✓[/green] Configuration written to [bold]{env_path}[/bold]")

    reload_env()

    console.print(
        Panel(
            f"[bold green]Setup complete![/bold green]\n\n"
            f"  Base dir : {base}\n"
            f"  Auth     : {'on' if auth_enabled else 'off'}\n"
            f"  Token    : {token}\n"
            f"  Port     : {port}\n\n"
            f"Then run [bold]patient-match start[/bold] to launch the server.",
            title="Done",
        )
    )


@app.command()
def start(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int | None = typer.Option(None, help="Override configured port"),
    reload: bool = typer.Option(False, help="Enable auto-reload (development)"),
) -> None:
    """Load configuration and start the patient-match server."""

    import uvicorn

    reload_env()
    settings = _load_settings_or_exit()
    effective_port = port if port is not None else settings.port

    console.print(
        Panel(
            f"Starting [bold cyan]patient-match[/bold cyan] server\n"
            f"  Address : http://{host}:{effective_port}\n"
            f"  Auth    : {'on' if settings.auth_enabled else 'off'}\n"
            f"  Reload  : {'on' if reload else 'off'}",
            title="patient-match",
        )
    )

    uvicorn.run(
        "patient_match.server:create_app",
        factory=True,
        host=host,
        port=effective_port,
        reload=reload,
    )


@app.command()
def status() -> None:
    """Show the current status of patient-match."""

    reload_env()
    settings = _load_settings_or_exit()

    env_exists = get_env_path().exists()
    server_running = _is_port_in_use(settings.port)
    audit_count = len(AuditLog(settings.audit_log_path).events()) if settings.audit_log_path else 0

    table = Table(title="patient-match status", show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Base directory", str(get_base_dir()))
    table.add_row(
        "Configuration",
        "[green]found[/green]" if env_exists else "[yellow]missing -- using defaults[/yellow]",
    )
    table.add_row(
        "Server",
        f"[green]running[/green] on port {settings.port}"
        if server_running
        else f"[yellow]stopped[/yellow] (port {settings.port})",
    )
    table.add_row("Authentication", "on" if settings.auth_enabled else "[yellow]off[/yellow]")
    table.add_row("Access tokens", str(len(settings.access_tokens)))
    table.add_row("Audit log", str(settings.audit_log_path))
    table.add_row("Audit entries", str(audit_count))

    console.print()
    console.print(table)
    console.print()


@app.command()
def check(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Parameters resource file"),
    xml: bool = typer.Option(False, "--xml", help="Read the file as FHIR XML (default: by extension)"),
) -> None:
    """Run the minimum-criteria gate on a Parameters file without a server."""

    wire_format = WireFormat.XML if xml or path.suffix.lower() == ".xml" else WireFormat.JSON

    try:
        patient = decode_patient(path.read_bytes(), wire_format)
    except MalformedInputError as exc:
        console.print(f"[red]Malformed input:[/red] {escape(exc.message)}")
        raise typer.Exit(code=EXIT_MALFORMED)

    outcome = validate(patient)
    fields = extract(patient)

    table = Table(title=f"{path.name} ({wire_format.value})", show_header=True)
    table.add_column("Signal")
    table.add_column("Present")
    for name, label in SIGNAL_LABELS.items():
        present = getattr(fields, name)
        table.add_row(label, "[green]yes[/green]" if present else "[dim]no[/dim]")
    console.print(table)

    console.print(f"Profile  : {escape(patient.declared_profile) if patient.declared_profile else '[red]<none>[/red]'}")
    console.print(f"Tier     : {classify(patient.declared_profile).value}")
    console.print(f"Score    : {score(fields)}")
    if outcome.accepted:
        console.print("[bold green]ACCEPTED[/bold green]")
        raise typer.Exit(code=EXIT_ACCEPTED)
    console.print(f"[bold red]REJECTED[/bold red] {escape(outcome.reason)}")
    raise typer.Exit(code=EXIT_REJECTED)


if __name__ == "__main__":
    app()
