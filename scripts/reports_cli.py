"""CLI for browsing and exporting attendance reports from the backend or a local dump."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from reportdesk.analytics.query import ALL, QueryState, apply_query, filter_options
from reportdesk.config import get_settings
from reportdesk.export.excel import ATTENDANCE_HEADER, attendance_rows, export_reports, export_roster, export_rows
from reportdesk.ingest.backend_api import BackendAPIError, BackendClient
from reportdesk.ingest.feed import FeedState, ReportFeed
from reportdesk.ingest.file_loader import load_reports_file
from reportdesk.ingest.models import Report

app = typer.Typer(help="Browse, summarize and export attendance reports")

DEFAULT_OUTPUT_DIR = Path("data/exports")


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging")) -> None:
    configure_logging(verbose)


def _load_feed(source: Optional[Path]) -> ReportFeed:
    if source is not None:
        batch = load_reports_file(source)
        for issue in batch.issues:
            typer.secho(f"- {issue}", fg=typer.colors.YELLOW)
        feed = ReportFeed(batch.iter_records)
    else:
        feed = ReportFeed(BackendClient().list_reports)

    if feed.refresh() == FeedState.FAILED:
        typer.secho(f"Could not load reports: {feed.error}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    return feed


def _print_row(report: Report) -> None:
    typer.echo(
        f"{report.display_name:<40} {report.batch:<8} {report.subject:<14} {report.section:<6} "
        f"{report.date:<10} {report.size:>10} {report.record_count:>6} {report.status.value}"
    )


@app.command()
def summary(source: Optional[Path] = typer.Option(None, help="Local JSON/CSV dump instead of the backend")) -> None:
    """Show total reports, size, records and the latest report date."""
    feed = _load_feed(source)
    stats = feed.stats
    if feed.is_empty:
        typer.secho("No reports found.", fg=typer.colors.YELLOW)
    typer.echo(f"Total reports: {stats.total_reports}")
    typer.echo(f"Total size:    {stats.total_size}")
    typer.echo(f"Total records: {stats.total_records}")
    typer.echo(f"Latest:        {stats.latest_label}")


@app.command()
def table(
    source: Optional[Path] = typer.Option(None, help="Local JSON/CSV dump instead of the backend"),
    search: str = typer.Option("", help="Case-insensitive search over batch, subject, section and date"),
    batch: str = typer.Option(ALL, help="Batch filter"),
    subject: str = typer.Option(ALL, help="Subject filter"),
    section: str = typer.Option(ALL, help="Section filter"),
    sort: Optional[str] = typer.Option(None, help="Sort column"),
    descending: bool = typer.Option(False, "--desc", help="Sort descending"),
    page: int = typer.Option(1, min=1, help="Page to show"),
) -> None:
    """Print one page of the report table."""
    feed = _load_feed(source)
    state = QueryState(
        search=search,
        batch=batch,
        subject=subject,
        section=section,
        page=page,
        page_size=get_settings().page_size,
    )
    if sort:
        try:
            state = state.toggle_sort(sort)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        if descending:
            state = state.toggle_sort(sort)

    result = apply_query(feed.reports, state)
    if not result.items:
        typer.secho("No reports found matching your criteria.", fg=typer.colors.YELLOW)
    for report in result.items:
        _print_row(report)
    typer.echo(f"Page {result.page}/{result.total_pages} ({result.total_matching} matching)")

    options = filter_options(feed.reports)
    typer.echo("Batches: " + (", ".join(options["batch"]) or "-"))
    typer.echo("Subjects: " + (", ".join(options["subject"]) or "-"))


@app.command("export-table")
def export_table(
    file_name: str = typer.Argument(..., help="Name of the spreadsheet to write"),
    source: Optional[Path] = typer.Option(None, help="Local JSON/CSV dump instead of the backend"),
    output_dir: Path = typer.Option(DEFAULT_OUTPUT_DIR, help="Directory for the spreadsheet"),
) -> None:
    """Re-export the normalized report table as a spreadsheet."""
    feed = _load_feed(source)
    target = export_reports(feed.reports, file_name).save(output_dir)
    typer.secho(f"Report table written to {target}", fg=typer.colors.GREEN)


@app.command("export-roster")
def export_roster_cmd(
    file_name: str = typer.Argument(..., help="Name of the spreadsheet to write"),
    names: List[str] = typer.Argument(None, help="Student names, in roster order"),
    output_dir: Path = typer.Option(DEFAULT_OUTPUT_DIR, help="Directory for the spreadsheet"),
) -> None:
    """Write a roster of student names to a spreadsheet."""
    target = export_roster(names or [], file_name).save(output_dir)
    typer.secho(f"Roster written to {target}", fg=typer.colors.GREEN)


@app.command("take-attendance")
def take_attendance(
    images: List[Path] = typer.Argument(..., exists=True, help="Class photos"),
    batch: str = typer.Option(..., help="Batch name"),
    subject: str = typer.Option(..., help="Subject name"),
    section: str = typer.Option("", help="Section / lab name"),
    output_dir: Path = typer.Option(DEFAULT_OUTPUT_DIR, help="Directory for the present-student roster"),
) -> None:
    """Send class photos to the backend and save the present-student roster."""
    try:
        result = BackendClient().take_attendance(images, batch=batch, subject=subject, section=section)
    except BackendAPIError as exc:
        typer.secho(f"Attendance failed: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    if not result.success:
        typer.secho(f"Attendance failed: {result.error or 'Unknown error'}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    file_name = f"{batch}_{subject}_{section or 'all'}_present"
    if result.present:
        artifact = export_rows(ATTENDANCE_HEADER, attendance_rows(result.present), file_name)
    else:
        artifact = export_roster(result.roster_names(), file_name)
    target = artifact.save(output_dir)
    typer.secho(
        f"{len(result.roster_names())} present, {len(result.absent)} absent. Roster written to {target}",
        fg=typer.colors.GREEN,
    )


if __name__ == "__main__":  # pragma: no cover
    app()
