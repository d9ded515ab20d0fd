#!/usr/bin/env python3
"""
CLI interface for Form Relay.
"""

import sys
from pathlib import Path

import click
import uvicorn
from loguru import logger
from rich.console import Console
from rich.table import Table
from rich.text import Text

from form_relay.core.exceptions import MalformedBodyError
from form_relay.utils.logging import setup_logging
from form_relay.webhooks.api import SERVICE_VERSION
from form_relay.webhooks.config import get_config
from form_relay.webhooks.services import FormMapper, parse_json_body

console = Console()


@click.group()
@click.version_option(version=SERVICE_VERSION)
def app():
    """Form Relay CLI."""
    pass


@app.command()
@click.option("--host", default=None, help="Host to bind to (defaults to RELAY_HOST)")
@click.option("--port", default=None, type=int, help="Port to bind to (defaults to RELAY_PORT)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
def serve(host: str | None, port: int | None, reload: bool):
    """Start the relay server."""
    config = get_config()
    setup_logging("form-relay", config.log_level, enable_json=config.json_logs)
    config.log_configuration()

    validation = config.validate_configuration()
    for error in validation["errors"]:
        logger.error(f"❌ {error}")
    for warning in validation["warnings"]:
        logger.warning(f"⚠️ {warning}")

    uvicorn.run(
        "form_relay.webhooks.api:create_app",
        factory=True,
        host=host or config.host,
        port=port or config.port,
        reload=reload,
        log_level=config.log_level.lower(),
    )


@app.command("config")
def show_config():
    """Show the effective configuration and validate it."""
    config = get_config()
    field_map = config.get_field_map()

    table = Table(title="Form Relay Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Server", f"{config.host}:{config.port}")
    table.add_row("Endpoint", config.endpoint_path)
    table.add_row("Form URL", config.form_action_url or "[red]not configured[/red]")
    table.add_row("Form timeout", f"{config.form_timeout}s")
    table.add_row(
        "Webhook secret",
        "[green]configured[/green]" if config.webhook_secret else "[red]not configured[/red]",
    )
    table.add_row("Field map entries", str(len(field_map)))
    table.add_row("Log level", config.log_level)

    console.print(table)

    validation = config.validate_configuration()
    for error in validation["errors"]:
        console.print(f"[red]✗ {error}[/red]")
    for warning in validation["warnings"]:
        console.print(f"[yellow]! {warning}[/yellow]")

    if not validation["valid"]:
        sys.exit(1)

    console.print("[green]✓ Configuration is valid[/green]")


@app.command()
@click.argument("body_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def preview(body_file: Path):
    """Show the form fields a JSON body would be relayed as, without sending it."""
    config = get_config()
    mapper = FormMapper(config.get_field_map())

    try:
        body = parse_json_body(body_file.read_bytes())
    except MalformedBodyError as e:
        raise click.ClickException(e.message)

    payload = mapper.build_payload(body)

    table = Table(title=f"Form payload for {body_file.name}")
    table.add_column("Field identifier", style="cyan")
    table.add_column("Value", style="white")

    for identifier, value in payload.fields:
        table.add_row(Text(identifier), Text(str(value)))

    console.print(table)
    console.print(
        f"{len(payload)} fields, encoded body: {payload.encode()}",
        markup=False,
        soft_wrap=True,
    )


if __name__ == "__main__":
    app()
