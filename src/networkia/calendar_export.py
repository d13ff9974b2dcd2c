"""Plain-text calendar (.ics) export.

Lines are joined with CRLF and the document ends with CRLF; calendar apps
reject bare LF. Only the small subset of RFC 5545 the export needs is
produced: all-day events with an optional recurrence rule.
"""
from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, timezone

from .errors import NothingToExport
from .model import CalendarEvent

PRODID = "-//Networkia//EN"
CRLF = "\r\n"
MIME_TYPE = "text/calendar; charset=utf-8"
BIRTHDAY_RRULE = "RRULE:FREQ=YEARLY"

_MONTHS: dict[str, int] = {
    "jan": 0, "january": 0,
    "feb": 1, "february": 1,
    "mar": 2, "march": 2,
    "apr": 3, "april": 3,
    "may": 4,
    "jun": 5, "june": 5,
    "jul": 6, "july": 6,
    "aug": 7, "august": 7,
    "sep": 8, "sept": 8, "september": 8,
    "oct": 9, "october": 9,
    "nov": 10, "november": 10,
    "dec": 11, "december": 11,
}


# ── Text fields ────────────────────────────────────────────────────────────────

def escape_ics_text(value: str) -> str:
    # Backslash first, otherwise the escapes added below get doubled.
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace(",", "\\,")


def unescape_ics_text(value: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch == "\\" and i + 1 < len(value):
            nxt = value[i + 1]
            if nxt in ("n", "N"):
                out.append("\n")
            else:
                out.append(nxt)
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def format_ics_date(value: date) -> str:
    return f"{value.year:04d}{value.month:02d}{value.day:02d}"


def format_ics_stamp(value: datetime) -> str:
    """Format a UTC timestamp. Naive datetimes are taken to be UTC already."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y%m%dT%H%M%SZ")


# ── Birthdays ──────────────────────────────────────────────────────────────────

def extract_birthday(value: str | None) -> tuple[int, int] | None:
    """Parse "August 18" / "aug 18" / "Sept 5" into (month 0-11, day).

    The day is not checked against the month: "February 30" parses.
    """
    if not value:
        return None
    parts = value.strip().split()
    if len(parts) < 2:
        return None
    month = _MONTHS.get(parts[0].lower())
    if month is None or not parts[1].isascii() or not parts[1].isdigit():
        return None
    try:
        return month, int(parts[1])
    except ValueError:
        # longer than the interpreter allows for int()
        return None


# ── Document ───────────────────────────────────────────────────────────────────

def build_calendar_document(
    events: Sequence[CalendarEvent],
    stamp: datetime | None = None,
) -> str:
    """Serialise events into one VCALENDAR document.

    ``stamp`` defaults to the current UTC time and is shared by every event.
    """
    if not events:
        raise NothingToExport()

    dtstamp = format_ics_stamp(stamp or datetime.now(timezone.utc))
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
    ]
    for event in events:
        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:{escape_ics_text(event.uid)}")
        lines.append(f"DTSTAMP:{dtstamp}")
        lines.append(f"DTSTART;VALUE=DATE:{format_ics_date(event.date)}")
        lines.append(f"SUMMARY:{escape_ics_text(event.summary)}")
        if event.rrule:
            lines.append(event.rrule)
        lines.append("END:VEVENT")
    lines.append("END:VCALENDAR")
    return CRLF.join(lines) + CRLF
