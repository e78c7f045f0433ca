"""CLI command for verifying a project's go.sum against fetched archives."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from modcheck.config import get_config
from modcheck.errors import ManifestReadError
from modcheck.fetcher import ArchiveFetcher
from modcheck.models import VerificationOutcome, VerificationRecord, VerificationReport
from modcheck.sumfile import find_sum_file, load_sum_file
from modcheck.verifier import Verifier, scratch_space

console = Console()

EXIT_FAILED = 1
EXIT_MANIFEST = 2


def _print_start(record: VerificationRecord) -> None:
    console.print(f"Checking {escape(record.key)}...", soft_wrap=True)


def _print_outcome(outcome: VerificationOutcome) -> None:
    if outcome.ok:
        console.print(f"✅ Verified {escape(outcome.key)}", soft_wrap=True)
    else:
        console.print(f"[yellow]⚠️  WARNING:[/yellow] {escape(outcome.cause or '')}", soft_wrap=True)


def _print_summary(report: VerificationReport) -> None:
    table = Table(title="Verification summary")
    table.add_column("Result", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("[green]verified[/green]", str(len(report.verified)))
    table.add_row("[red]mismatch[/red]", str(len(report.mismatches)))
    table.add_row("[yellow]error[/yellow]", str(len(report.errors)))
    table.add_row("[dim]skipped (go.mod)[/dim]", str(len(report.skipped)))
    console.print(table)

    for outcome in report.mismatches:
        console.print(f"\n[red bold]Checksum mismatch:[/red bold] {escape(outcome.key)}")
        console.print(f"  expected: {outcome.expected}", soft_wrap=True)
        console.print(f"  actual:   {outcome.actual}", soft_wrap=True)


@click.command()
@click.argument("project_dir", type=click.Path(path_type=Path))
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Parallel verifications")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), default=None,
              help="HTTP timeout in seconds")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def verify(project_dir: Path, workers: int | None, timeout: float | None, as_json: bool, verbose: bool):
    """Verify every module archive listed in PROJECT_DIR/go.sum."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    cfg = get_config()

    try:
        records = load_sum_file(find_sum_file(project_dir))
    except ManifestReadError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        raise SystemExit(EXIT_MANIFEST)

    targets = [r for r in records if not r.is_declaration]
    if not as_json:
        console.print(
            f"Verifying {len(targets)} module archive(s) "
            f"[dim]({len(records) - len(targets)} go.mod entries skipped)[/dim]"
        )

    fetcher = ArchiveFetcher(
        timeout=timeout or cfg.timeout,
        max_bytes=cfg.max_archive_bytes,
        user_agent=cfg.user_agent,
    )
    verifier = Verifier(
        fetcher,
        workers=workers or cfg.workers,
        max_extracted_bytes=cfg.max_extracted_bytes,
    )
    with fetcher, scratch_space(cfg.scratch_parent) as scratch:
        report = verifier.verify(
            records,
            scratch,
            on_result=None if as_json else _print_outcome,
            on_start=None if as_json else _print_start,
        )

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        console.print()
        _print_summary(report)

    if not report.ok:
        raise SystemExit(EXIT_FAILED)
