"""CLI commands for configuration management."""

import json
import shutil
import sys
from typing import Any

import click
import yaml  # type: ignore[import-untyped]
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ttrk.core.config import ConfigManager
from ttrk.core.errors import ConfigError

console = Console()
error_console = Console(stderr=True)


def _config_manager(ctx: click.Context) -> ConfigManager:
    return ctx.obj["config"]


@click.group()
def config() -> None:
    """Manage ttrk configuration.

    Configuration is stored in ~/.ttrk/config.yml unless --config is given.
    """
    pass


@config.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def config_show(ctx: click.Context, as_json: bool) -> None:
    """Show all configuration settings.

    Example:
        ttrk config show
        ttrk config show --json
    """
    config_mgr = _config_manager(ctx)

    if as_json:
        click.echo(json.dumps(config_mgr.to_dict(), indent=2))
        return

    table = Table(title="ttrk Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for key in config_mgr.get_all_keys():
        table.add_row(key, escape(str(config_mgr.get(key))))

    console.print(table)
    console.print(f"\nConfig file: {config_mgr.config_path}", soft_wrap=True)


@config.command("get")
@click.argument("key")
@click.pass_context
def config_get(ctx: click.Context, key: str) -> None:
    """Get a specific configuration value.

    Uses dot notation to access nested values.

    Example:
        ttrk config get general.logfile
    """
    value = _config_manager(ctx).get(key)

    if value is None:
        error_console.print(f"[red]Error:[/red] Configuration key '{escape(key)}' not set")
        sys.exit(1)

    if isinstance(value, dict):
        click.echo(json.dumps(value, indent=2))
    else:
        click.echo(str(value))


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Set a configuration value.

    Values are read as YAML scalars, so 'null' clears a setting.

    Example:
        ttrk config set general.week_start monday
        ttrk config set general.editor "code --wait"
        ttrk config set general.editor null
    """
    converted_value: Any
    try:
        converted_value = yaml.safe_load(value)
    except yaml.YAMLError:
        converted_value = value
    if isinstance(converted_value, (dict, list)):
        converted_value = value

    try:
        _config_manager(ctx).set(key, converted_value)
        console.print(f"[green]✓[/green] Set {escape(key)} = {escape(str(converted_value))}")
    except ConfigError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)


@config.command("reset")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def config_reset(ctx: click.Context, yes: bool) -> None:
    """Reset configuration to defaults.

    Example:
        ttrk config reset
        ttrk config reset --yes
    """
    config_mgr = _config_manager(ctx)

    if not yes:
        console.print("[yellow]Warning:[/yellow] This will reset all configuration to defaults.")
        if not click.confirm("Continue?"):
            console.print("Cancelled")
            return

    backup_path = config_mgr.config_path.with_suffix(".yml.backup")
    if config_mgr.config_path.exists():
        shutil.copy(config_mgr.config_path, backup_path)
        console.print(f"Backed up current config to {backup_path}", soft_wrap=True)

    config_mgr.reset()
    console.print("[green]✓[/green] Configuration reset to defaults")


@config.command("path")
@click.pass_context
def config_path(ctx: click.Context) -> None:
    """Show path to configuration file.

    Example:
        ttrk config path
    """
    click.echo(str(_config_manager(ctx).config_path))
