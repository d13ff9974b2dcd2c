from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

import typer
from rich.console import Console

from .config import ensure_workspace
from .errors import ContactNotFound, NothingToExport
from .events import export_calendar
from .io import collect_vcf_sources, read_contacts_from_vcf
from .report import (
    next_meet_rows,
    print_circles,
    print_contact,
    print_export_summary,
    print_next_meets,
    print_nothing_to_export,
)
from .slug import find_contact
from .store import ContactStore, advance_next_meets

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="networkia: keep track of the people you know and when you'll next see them.",
)
console = Console()


def _store(base: Path | None) -> tuple[ContactStore, Path, str, str]:
    paths, settings = ensure_workspace(base)
    store = ContactStore.for_settings(paths.data_dir, settings)
    return store, paths.export_dir, settings.calendar_filename, settings.default_region


def _parse_today(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        console.print(f"[bold red]--today must be YYYY-MM-DD, got {value!r}[/bold red]")
        raise typer.Exit(code=2)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ── `next-meet` command ────────────────────────────────────────────────────────

@app.command("next-meet")
def next_meet(
    workspace: Path | None = typer.Option(None, "--workspace", "-w", help="Workspace folder (default: cwd)"),
    today: str | None = typer.Option(None, "--today", help="Pretend today is YYYY-MM-DD"),
) -> None:
    """List upcoming meets, moving recurring ones past today (without saving)."""
    store, *_ = _store(workspace)
    rows = next_meet_rows(store.load_contacts(), _parse_today(today))
    print_next_meets(rows)


# ── `advance` command ──────────────────────────────────────────────────────────

@app.command()
def advance(
    workspace: Path | None = typer.Option(None, "--workspace", "-w"),
    today: str | None = typer.Option(None, "--today", help="Pretend today is YYYY-MM-DD"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would move without saving"),
) -> None:
    """Save advanced dates for recurring next meets that are in the past."""
    store, *_ = _store(workspace)
    contacts = store.load_contacts()
    moved = advance_next_meets(contacts, _parse_today(today))
    for c in moved:
        console.print(f"  {c.name}: [bold]{c.next_meet_date}[/bold]")
    if dry_run:
        console.print(f"\n[yellow bold]Dry-run — {len(moved)} date(s) would move.[/yellow bold]")
        return
    if moved:
        store.save_contacts(contacts)
    console.print(f"\n[bold green]✓ Advanced {len(moved)} next meet(s)[/bold green]")


# ── `export-calendar` command ──────────────────────────────────────────────────

@app.command("export-calendar")
def export_calendar_cmd(
    workspace: Path | None = typer.Option(None, "--workspace", "-w"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Explicit output .ics path"),
) -> None:
    """Write next meets and birthdays to an .ics file for your calendar app."""
    store, export_dir, filename, _ = _store(workspace)
    out_path = output or export_dir / filename
    try:
        count = export_calendar(store.load_contacts(), out_path)
    except NothingToExport as exc:
        print_nothing_to_export(str(exc))
        raise typer.Exit(code=2)
    print_export_summary(count, out_path)


# ── `import-vcf` command ───────────────────────────────────────────────────────

@app.command("import-vcf")
def import_vcf(
    source: Path = typer.Argument(..., help="A .vcf file or a folder of them"),
    workspace: Path | None = typer.Option(None, "--workspace", "-w"),
    region: str | None = typer.Option(None, "--region", "-r", help="Phone region ISO-2 code"),
) -> None:
    """Import contacts from vCard exports; names already stored are skipped."""
    store, _, _, default_region = _store(workspace)
    files = collect_vcf_sources(source)
    if not files:
        console.print(f"[bold red]No .vcf files found at {source}[/bold red]")
        raise typer.Exit(code=2)
    contacts = read_contacts_from_vcf(files, region or default_region)
    added, skipped = store.add_contacts(contacts)
    console.print(
        f"[bold green]✓ Imported {added} contact(s)[/bold green]"
        + (f"  [dim]({skipped} already present)[/dim]" if skipped else "")
    )


# ── `circles` / `show` ─────────────────────────────────────────────────────────

@app.command()
def circles(workspace: Path | None = typer.Option(None, "--workspace", "-w")) -> None:
    """Show circle settings."""
    store, *_ = _store(workspace)
    print_circles(store.load_circles())


@app.command()
def show(
    query: str = typer.Argument(..., help="Contact id, slug or (part of a) name"),
    workspace: Path | None = typer.Option(None, "--workspace", "-w"),
) -> None:
    """Show one contact."""
    store, *_ = _store(workspace)
    try:
        contact = find_contact(store.load_contacts(), query)
    except ContactNotFound as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=2)
    print_contact(contact)


# ── `serve` ────────────────────────────────────────────────────────────────────

@app.command()
def serve(
    workspace: Path | None = typer.Option(None, "--workspace", "-w"),
    port: int = typer.Option(8421, "--port", "-p"),
) -> None:
    """Run the local JSON API (contacts, next meets, calendar download)."""
    from .server import run

    paths, settings = ensure_workspace(workspace)
    run(paths, settings, port=port)


if __name__ == "__main__":
    app()
