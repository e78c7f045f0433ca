"""CLI helpers for hashing local trees and showing archive URLs."""

from pathlib import Path

import click
from rich.console import Console

from modcheck.dirhash import hash_dir
from modcheck.errors import ModCheckError
from modcheck.locator import match_strategy

console = Console()


@click.command(name="hash")
@click.argument("directory", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--prefix", required=True, help="Name prefix, usually MODULE@VERSION")
def hash_tree(directory: Path, prefix: str):
    """Print the h1: digest of a local directory tree."""
    try:
        digest = hash_dir(directory, prefix)
    except ModCheckError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    click.echo(digest)


@click.command()
@click.argument("module_path")
@click.argument("version")
def url(module_path: str, version: str):
    """Show the archive URL used for MODULE_PATH at VERSION."""
    try:
        strategy = match_strategy(module_path)
    except ModCheckError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    console.print(f"[dim]{strategy.name}[/dim]  {strategy.url_for(module_path, version)}")
