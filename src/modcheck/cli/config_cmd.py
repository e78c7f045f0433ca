"""CLI commands for configuration."""

import click
from rich.console import Console

from modcheck.config import get_config

console = Console()


@click.group(name="config")
def config():
    """Manage modcheck configuration."""
    pass


@config.command()
def show():
    """Show current configuration."""
    cfg = get_config()
    console.print(f"Workers:          {cfg.workers}")
    console.print(f"Timeout:          {cfg.timeout}s")
    console.print(f"Max archive size: {cfg.max_archive_bytes} bytes")
    console.print(f"Max unpacked:     {cfg.max_extracted_bytes} bytes")
    console.print(f"User agent:       {cfg.user_agent}")
    console.print(f"\nData dir:         {cfg.data_dir}")
    console.print(f"Cache dir:        {cfg.cache_dir}")


@config.command(name="set")
@click.argument("key")
@click.argument("value")
def set_config(key: str, value: str):
    """Set a configuration value."""
    cfg = get_config()
    try:
        coerced = cfg.set_value(key, value)
    except KeyError:
        console.print(f"[red]Invalid key:[/red] {key}")
        console.print(f"Valid keys: {', '.join(cfg.SETTINGS)}")
        raise SystemExit(1)
    except ValueError as e:
        console.print(f"[red]Invalid value for {key}:[/red] {e}")
        raise SystemExit(1)

    cfg.save()
    console.print(f"[green]Set {key} = {coerced}[/green]")
