"""modcheck CLI - main entry point."""

import click

from modcheck import __version__
from modcheck.cli.config_cmd import config
from modcheck.cli.inspect_cmd import hash_tree, url
from modcheck.cli.verify import verify


@click.group()
@click.version_option(version=__version__, prog_name="modcheck")
def cli():
    """modcheck - verify dependency archives against go.sum checksums."""
    pass


cli.add_command(verify)
cli.add_command(hash_tree)
cli.add_command(url)
cli.add_command(config)


if __name__ == "__main__":
    cli()
