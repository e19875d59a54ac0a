"""Configuration commands."""

from __future__ import annotations

from typing import Annotated

import typer

from ...config import RulesConfig
from ..output import console, print_error, print_info, print_success

app = typer.Typer(help="Manage configuration")


@app.command("show")
def show_config():
    """Show current configuration."""
    config = RulesConfig.load()

    console.print("[cyan]Current Configuration[/cyan]\n")
    console.print(f"  origin: {config.origin}")
    console.print(f"  project: {config.project or '(none)'}")
    console.print(f"  timeout: {config.timeout}s")
    console.print(f"  token: {'(set)' if config.token else '(not set, use RULEKEEPER_TOKEN)'}")

    console.print(f"\n[bold]Config file:[/bold] {config.CONFIG_FILE}")
    if not config.CONFIG_FILE.exists():
        print_info("No config file (using defaults)")


@app.command("set")
def set_config(
    key: Annotated[str, typer.Argument(help="Config key (origin, project, timeout)")],
    value: Annotated[str, typer.Argument(help="Config value")],
):
    """Set a configuration value.

    Available keys:
    - origin: Rules API origin URL
    - project: Default project id
    - timeout: Request timeout in seconds

    The access token is read from RULEKEEPER_TOKEN and is never saved.
    """
    config = RulesConfig.load()

    key_lower = key.lower()
    if key_lower == "origin":
        config.origin = value.rstrip("/")
    elif key_lower == "project":
        config.project = value if value.lower() != "none" else None
    elif key_lower == "timeout":
        try:
            config.timeout = float(value)
        except ValueError:
            print_error(f"Invalid number: {value}")
            raise typer.Exit(1)
    else:
        print_error(f"Unknown key: {key}")
        console.print("Available: origin, project, timeout")
        raise typer.Exit(1)

    config.save()
    print_success(f"Set {key_lower} = {value}")
