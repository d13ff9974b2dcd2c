from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, timedelta
from pathlib import Path

from .calendar_export import BIRTHDAY_RRULE, build_calendar_document, extract_birthday
from .errors import NothingToExport
from .model import CalendarEvent, Contact
from .next_meet import parse_calendar_date

logger = logging.getLogger(__name__)

UID_PREFIX = "networkia-"


def _birthday_in_year(year: int, month0: int, day: int) -> date:
    # Out-of-range days roll over into the neighbouring month ("February 30" -> March 1/2).
    return date(year, month0 + 1, 1) + timedelta(days=day - 1)


def collect_calendar_events(
    contacts: Iterable[Contact],
    today: date | None = None,
) -> list[CalendarEvent]:
    """Build next-meet and birthday events, skipping keys already seen."""
    year = (today or date.today()).year
    events: list[CalendarEvent] = []
    added: set[str] = set()

    for contact in contacts:
        if contact.next_meet_date:
            meet = parse_calendar_date(contact.next_meet_date)
            if meet is not None:
                key = f"next-{contact.id}-{contact.next_meet_date}"
                if key not in added:
                    added.add(key)
                    events.append(CalendarEvent(
                        uid=f"{UID_PREFIX}{key}",
                        summary=f"Next meet: {contact.name}",
                        date=meet,
                    ))
            else:
                logger.debug("%s: unparseable next meet %r", contact.id, contact.next_meet_date)

        parsed = extract_birthday(contact.birthday)
        if parsed is None:
            continue
        month0, day = parsed
        key = f"bday-{contact.id}-{month0}-{day}"
        if key in added:
            continue
        try:
            when = _birthday_in_year(year, month0, day)
        except OverflowError:
            logger.debug("%s: birthday day %d out of range", contact.id, day)
            continue
        added.add(key)
        events.append(CalendarEvent(
            uid=f"{UID_PREFIX}{key}",
            summary=f"Birthday: {contact.name}",
            date=when,
            rrule=BIRTHDAY_RRULE,
        ))

    return events


def export_calendar(
    contacts: Iterable[Contact],
    path: Path,
    today: date | None = None,
) -> int:
    """Write every collected event to ``path``; return the event count."""
    events = collect_calendar_events(contacts, today=today)
    if not events:
        raise NothingToExport()
    document = build_calendar_document(events)
    path.parent.mkdir(parents=True, exist_ok=True)
    # newline="" keeps the CRLF terminators intact on every platform
    with path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(document)
    logger.info("Wrote %d calendar event(s) to %s", len(events), path)
    return len(events)
