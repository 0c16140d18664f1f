"""Doctor command for environment diagnostics."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from witai.cli.ui_components import print_banner
from witai.core.config import AppSettings, write_user_env_vars
from witai.core.errors import WitError
from witai.core.services.client import WitClient

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_api(settings: AppSettings) -> tuple[bool, str]:
    """Call `GET /intents` as a cheap authenticated round-trip."""

    try:
        with WitClient(settings=settings) as client:
            intents = client.list_intents()
        return True, f"{len(intents)} intents visible"
    except (WitError, ValueError) as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    print_banner(_console)

    table = Table(title="witai Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    if settings.access_token:
        table.add_row("Access token", "OK", "Token configured")
    else:
        table.add_row("Access token", "MISSING", "Run `witai doctor setup-token`")
    table.add_row("API version", "OK", settings.api_version)
    table.add_row("Base URL", "OK", settings.base_url)

    # Connectivity (best-effort)
    if settings.access_token:
        ok_api, detail_api = _check_api(settings)
        table.add_row("API round-trip", "OK" if ok_api else "FAIL", detail_api)

    _console.print(table)


@app.command(name="setup-token")
def setup_token() -> None:
    """Interactive token setup (stores config in the user config .env)."""

    token = typer.prompt("Wit.ai access token", hide_input=True, confirmation_prompt=False).strip()
    version = typer.prompt(
        "API version",
        default=AppSettings.model_fields["api_version"].default,
        show_default=True,
    ).strip()

    if not token:
        raise typer.BadParameter("token is required")

    env_path = write_user_env_vars(
        {
            "WITAI_ACCESS_TOKEN": token,
            "WITAI_API_VERSION": version or None,
        }
    )

    _console.print(f"[green]Saved witai config to:[/green] {env_path}")
