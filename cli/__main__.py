import logging
from pathlib import Path
from typing import Optional

import typer

from cli import commands
from oncall import config
from oncall.db import init_db
from oncall.reports import format_gap_report, format_schedule_report
from oncall.shifts import check_coverage, create_shift, list_shifts, resolve_window

app = typer.Typer(add_completion=False)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.LOG_LEVEL,
        format=config.LOG_FORMAT,
    )


@app.command("init-db")
def init_database(path: Optional[Path] = typer.Option(None, dir_okay=False, help="Database file")) -> None:
    db_file = commands.init_database(path)
    typer.echo(f"Initialized {db_file}")


@app.command("add-shift")
def add_shift(
    user_name: str = typer.Option(..., help="Person on call"),
    start: str = typer.Option(..., help="Shift start (ISO8601)"),
    end: str = typer.Option(..., help="Shift end (ISO8601)"),
    user_id: Optional[str] = typer.Option(None),
    user_email: Optional[str] = typer.Option(None),
    user_phone: Optional[str] = typer.Option(None),
    priority: Optional[str] = typer.Option(None, help="normal, primary, backup or high"),
    on_call_type: Optional[str] = typer.Option(None, "--type", help="liaison, general, emergency, ..."),
    notes: Optional[str] = typer.Option(None),
) -> None:
    """Add a single on-call shift."""
    init_db()
    try:
        shift_id = create_shift(
            user_name=user_name,
            start_datetime=start,
            end_datetime=end,
            user_id=user_id,
            user_email=user_email,
            user_phone=user_phone,
            notes=notes,
            priority_level=priority,
            on_call_type=on_call_type,
            created_by_name="CLI",
        )
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Added shift {shift_id}")


@app.command("import-shifts")
def import_shifts(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    skip_errors: bool = typer.Option(False, "--skip-errors", help="Skip malformed or conflicting rows"),
    on_call_type: Optional[str] = typer.Option(None, "--type", help="Type for rows that do not set one"),
    verbose: bool = typer.Option(False, "--details", help="Show every skipped row"),
) -> None:
    """Import shifts from a CSV, NDJSON or YAML file."""
    try:
        result = commands.import_shifts(
            file, skip_errors=skip_errors, on_call_type=on_call_type, created_by_name="CLI import"
        )
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    for line in commands.print_import_report(result, verbose=verbose):
        typer.echo(line)


@app.command("coverage")
def coverage(
    start: Optional[str] = typer.Option(None, help="Window start (ISO8601), defaults to now"),
    end: Optional[str] = typer.Option(None, help="Window end (ISO8601), defaults to 30 days ahead"),
    on_call_type: Optional[str] = typer.Option(None, "--type"),
    show_overlaps: bool = typer.Option(False, "--overlaps", help="List overlapping shifts"),
) -> None:
    """Check on-call coverage and list gaps."""
    init_db()
    try:
        window = resolve_window(start, end)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    _, report = check_coverage(window, on_call_type)
    for line in commands.print_coverage(report, verbose=show_overlaps):
        typer.echo(line)


@app.command("gap-report")
def gap_report(
    start: Optional[str] = typer.Option(None),
    end: Optional[str] = typer.Option(None),
    on_call_type: Optional[str] = typer.Option(None, "--type"),
    output: Optional[Path] = typer.Option(None, dir_okay=False, help="Write the report to a file"),
) -> None:
    """Print the gap report sent to managers."""
    init_db()
    try:
        window = resolve_window(start, end)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    _, report = check_coverage(window, on_call_type)
    text = format_gap_report(report, on_call_type)
    if output:
        output.write_text(text + "\n", encoding="utf-8")
        typer.echo(f"Wrote {output}")
    else:
        typer.echo(text)


@app.command("schedule-report")
def schedule_report(
    start: Optional[str] = typer.Option(None, help="Window start (ISO8601), defaults to now"),
    end: Optional[str] = typer.Option(None, help="Window end (ISO8601), defaults to 30 days ahead"),
    on_call_type: Optional[str] = typer.Option(None, "--type"),
    output: Optional[Path] = typer.Option(None, dir_okay=False, help="Write the CSV to a file"),
) -> None:
    """Export the schedule as CSV with a coverage summary."""
    init_db()
    try:
        window = resolve_window(start, end)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    _, report = check_coverage(window, on_call_type)
    shifts_df = list_shifts(window.start, window.end, on_call_type=on_call_type)
    text = format_schedule_report(shifts_df, report, on_call_type)
    if output:
        output.write_text(text + "\n", encoding="utf-8")
        typer.echo(f"Wrote {output} ({len(shifts_df)} assignments)")
    else:
        typer.echo(text)


if __name__ == "__main__":
    app()
