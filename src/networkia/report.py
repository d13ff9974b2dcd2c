from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .circles import CircleSetting
from .model import Contact
from .next_meet import (
    days_since,
    format_calendar_date,
    is_overdue,
    normalize_cadence,
    resolve_effective_next_meet,
)

console = Console()

# ── Palette ────────────────────────────────────────────────────────────────────
_ACCENT  = "#4d9fff"
_GREEN   = "#3ecf8e"
_AMBER   = "#f0a500"
_RED     = "#f05c5c"
_TEXT    = "#c9d1e0"
_MID     = "#8896af"
_DIM     = "#546075"
_BORDER  = "#2a3347"


def next_meet_rows(contacts: list[Contact], now: date | None = None) -> list[dict[str, Any]]:
    """One row per contact with a next meet, soonest first."""
    rows: list[dict[str, Any]] = []
    for c in contacts:
        effective, did_advance = resolve_effective_next_meet(c.next_meet_date, c.next_meet_cadence, now)
        if effective is None:
            continue
        cadence = normalize_cadence(c.next_meet_cadence)
        rows.append({
            "id": c.id,
            "name": c.name,
            "stored": c.next_meet_date,
            "cadence": cadence.value if cadence else None,
            "effective": format_calendar_date(effective),
            "didAdvance": did_advance,
            "overdue": is_overdue(c.next_meet_date, c.next_meet_cadence, now),
            "daysAgo": days_since(c.last_contact, now),
        })
    rows.sort(key=lambda r: (r["effective"], r["name"].lower()))
    return rows


def print_next_meets(rows: list[dict[str, Any]]) -> None:
    if not rows:
        console.print(Text("  No next meets scheduled.", style=f"dim {_DIM}"))
        return

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Contact")
    table.add_column("Next meet")
    table.add_column("Cadence")
    table.add_column("Last contact", justify="right")
    for r in rows:
        when = Text(r["effective"], style=_TEXT)
        if r["overdue"]:
            when = Text(f"{r['effective']}  overdue", style=f"bold {_RED}")
        elif r["didAdvance"]:
            when.append(f"  (was {r['stored'][:10]})", style=f"dim {_DIM}")
        days = r["daysAgo"]
        table.add_row(
            r["name"],
            when,
            Text(r["cadence"] or "one-off", style=_MID),
            "" if days is None else f"{days}d ago",
        )
    console.print(table)


def print_circles(circles: list[CircleSetting]) -> None:
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("#", justify="right", style=_DIM)
    table.add_column("Circle")
    table.add_column("Active")
    for i, c in enumerate(circles, start=1):
        table.add_row(
            str(i),
            c.name or Text("(empty)", style=f"dim {_DIM}"),
            Text("yes", style=_GREEN) if c.is_active else Text("no", style=_DIM),
        )
    console.print(table)


def print_contact(contact: Contact, now: date | None = None) -> None:
    effective, _ = resolve_effective_next_meet(contact.next_meet_date, contact.next_meet_cadence, now)
    body = Text()
    body.append(f"{contact.name}\n", style=f"bold {_ACCENT}")
    for label, value in (
        ("Title", contact.title),
        ("Company", contact.company),
        ("Email", contact.email),
        ("Phone", contact.phone),
        ("Location", contact.location),
        ("Circles", ", ".join(contact.tags)),
        ("Birthday", contact.birthday),
        ("Next meet", format_calendar_date(effective) if effective else None),
    ):
        if value:
            body.append(f"{label:<10}", style=f"dim {_DIM}")
            body.append(f"{value}\n", style=_TEXT)
    if contact.personal_notes:
        body.append("\n")
        body.append(contact.personal_notes, style=_MID)
    console.print(Panel(body, border_style=_BORDER, padding=(0, 2)))


def print_export_summary(count: int, out_path: Path) -> None:
    body = Text()
    body.append(f"✓  Exported {count} event(s)\n", style=f"bold {_GREEN}")
    body.append(str(out_path), style=f"dim {_MID}")
    console.print(Panel(body, border_style=_GREEN, padding=(0, 2)))


def print_nothing_to_export(message: str) -> None:
    console.print(Panel(
        f"[{_AMBER}]{message}[/]\n\n"
        "Add a next-meet date or a birthday (e.g. [bold]August 18[/bold]) to a contact first.",
        title="Nothing to export",
        border_style=_AMBER,
    ))
