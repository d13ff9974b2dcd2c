"""Next-meet dates: parsing, cadence advancement and recurrence rules.

A contact stores a single ``nextMeetDate`` plus an optional cadence. The
stored date is never rewritten here; callers get the effective date for
display and decide themselves whether to persist it (see
``store.advance_next_meets``).
"""
from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from .model import Cadence, EffectiveNextMeet

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"[0-9]+")

_DAY_INTERVALS = {
    Cadence.WEEKLY: 7,
    Cadence.BIWEEKLY: 14,
}
_MONTH_INTERVALS = {
    Cadence.MONTHLY: 1,
    Cadence.QUARTERLY: 3,
}
_RRULES = {
    Cadence.WEEKLY: "RRULE:FREQ=WEEKLY;INTERVAL=1",
    Cadence.BIWEEKLY: "RRULE:FREQ=WEEKLY;INTERVAL=2",
    Cadence.MONTHLY: "RRULE:FREQ=MONTHLY;INTERVAL=1",
    Cadence.QUARTERLY: "RRULE:FREQ=MONTHLY;INTERVAL=3",
}


# ── Parsing / formatting ───────────────────────────────────────────────────────

def _to_date(value: date | datetime | None) -> date:
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_calendar_date(value: str | None) -> date | None:
    """Parse ``YYYY-MM-DD`` (anything after a ``T`` is ignored).

    Returns None for missing, non-numeric or zero parts and for dates that
    do not exist on the calendar.
    """
    if not value or not isinstance(value, str):
        return None
    parts = value.split("T", 1)[0].split("-")
    if len(parts) < 3:
        return None
    fields = [part.strip() for part in parts[:3]]
    if not all(_DIGITS.fullmatch(part) for part in fields):
        return None
    try:
        year, month, day = (int(part) for part in fields)
        if not year or not month or not day:
            return None
        return date(year, month, day)
    except ValueError:
        logger.debug("Rejected impossible calendar date %r", value)
        return None


def format_calendar_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def normalize_cadence(value: object) -> Cadence | None:
    """Map free text (``" Monthly "``) or a Cadence to a Cadence, else None."""
    if isinstance(value, Cadence):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Cadence(value.strip().lower())
    except ValueError:
        return None


# ── Arithmetic ─────────────────────────────────────────────────────────────────

def add_months_clamped(value: date, months: int) -> date:
    """Add whole months, keeping the day-of-month where the target month has it.

    >>> add_months_clamped(date(2024, 1, 31), 1)
    datetime.date(2024, 2, 29)
    """
    return value + relativedelta(months=months)


def _next_from_cadence(base: date, cadence: Cadence, today: date) -> date:
    if base >= today:
        return base

    if cadence in _DAY_INTERVALS:
        interval = _DAY_INTERVALS[cadence]
        diff_days = (today - base).days
        intervals = diff_days // interval + 1
        return base + timedelta(days=intervals * interval)

    interval = _MONTH_INTERVALS[cadence]
    months_diff = (today.year - base.year) * 12 + (today.month - base.month)
    intervals = months_diff // interval
    nxt = add_months_clamped(base, intervals * interval)
    if nxt < today:
        # Month count ignores day-of-month, so it can land one period short.
        intervals += 1
        nxt = add_months_clamped(base, intervals * interval)
    return nxt


def resolve_effective_next_meet(
    stored_date: str | None,
    cadence: Cadence | str | None,
    now: date | datetime | None = None,
) -> EffectiveNextMeet:
    """Return the date to show for a contact's next meet.

    Without a cadence the stored date is returned as-is, even when it is in
    the past. With a cadence, a past date is moved forward by whole periods
    to the first occurrence on or after today. Malformed input yields
    ``(None, False)``.
    """
    parsed = parse_calendar_date(stored_date)
    if parsed is None:
        return EffectiveNextMeet(None, False)

    cad = normalize_cadence(cadence)
    if cad is None:
        return EffectiveNextMeet(parsed, False)

    today = _to_date(now)
    try:
        nxt = _next_from_cadence(parsed, cad, today)
    except (OverflowError, ValueError):
        logger.debug("Next meet for %r runs past the last representable date", stored_date)
        return EffectiveNextMeet(None, False)
    return EffectiveNextMeet(nxt, parsed < today)


def cadence_rrule(cadence: Cadence | str | None) -> str | None:
    cad = normalize_cadence(cadence)
    return _RRULES[cad] if cad else None


def is_overdue(
    stored_date: str | None,
    cadence: Cadence | str | None,
    now: date | datetime | None = None,
) -> bool:
    """True for a one-off next meet whose date has already passed."""
    effective, _ = resolve_effective_next_meet(stored_date, cadence, now)
    return effective is not None and effective < _to_date(now)


def days_since(last_contact: str | None, now: date | datetime | None = None) -> int | None:
    """Whole days between ``last_contact`` and today (the web client's ``daysAgo``)."""
    parsed = parse_calendar_date(last_contact)
    if parsed is None:
        return None
    return (_to_date(now) - parsed).days
