"""store.py — JSON-file persistence for one storage scope.

Signed-out use reads and writes the demo scope; with an owner email set the
live scope ``<live_key_prefix><email>`` is used instead. Each scope holds
two files in the data directory:

  - <scope>.contacts.json   list of contact objects (web client JSON shape)
  - <scope>.circles.json    list of circle settings

A missing or unreadable file loads as the scope's defaults; storage errors
never abort the caller.
"""
from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path

from .circles import CircleSetting, default_circle_settings, pad_circles
from .config import Settings
from .model import Contact
from .next_meet import format_calendar_date, resolve_effective_next_meet
from .slug import create_contact_slug, generate_initials

logger = logging.getLogger(__name__)

CONTACTS_SUFFIX = ".contacts.json"
CIRCLES_SUFFIX = ".circles.json"


def storage_key(email: str | None, demo_key: str, live_key_prefix: str) -> str:
    return f"{live_key_prefix}{email}" if email else demo_key


def demo_contacts() -> list[Contact]:
    now = datetime.now(timezone.utc).isoformat()
    return [
        Contact(
            id="demo-1", name="Sarah Chen", email="sarah.chen@example.com",
            phone="+1 (555) 123-4567", company="TechCorp Inc", location="San Francisco",
            personal_notes="Met at conference. Interested in collaboration.",
            tags=["Work"], created_at=now, updated_at=now,
        ),
        Contact(
            id="demo-2", name="James Wilson", email="j.wilson@example.com",
            company="Design Studio", location="New York",
            personal_notes="Potential client for Q2",
            tags=["Work"], created_at=now, updated_at=now,
        ),
        Contact(
            id="demo-3", name="Maria Garcia", phone="+1 (555) 987-6543",
            company="Startup Labs", location="Austin",
            personal_notes="Advisor, monthly check-ins",
            tags=["Acquaintance"], created_at=now, updated_at=now,
        ),
    ]


class ContactStore:
    def __init__(self, data_dir: Path, key: str, is_demo: bool = False):
        self.data_dir = data_dir
        self.key = key
        self.is_demo = is_demo

    @classmethod
    def for_settings(cls, data_dir: Path, settings: Settings) -> ContactStore:
        key = storage_key(settings.owner_email, settings.demo_key, settings.live_key_prefix)
        return cls(data_dir, key, is_demo=not settings.owner_email)

    @property
    def contacts_path(self) -> Path:
        return self.data_dir / f"{self.key}{CONTACTS_SUFFIX}"

    @property
    def circles_path(self) -> Path:
        return self.data_dir / f"{self.key}{CIRCLES_SUFFIX}"

    def _read_list(self, path: Path) -> list | None:
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable store file %s: %s", path, exc)
            return None
        if not isinstance(data, list):
            logger.warning("Store file %s does not hold a list", path)
            return None
        return data

    def _write(self, path: Path, data: list) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    # ── Contacts ───────────────────────────────────────────────────────────────

    def load_contacts(self) -> list[Contact]:
        raw = self._read_list(self.contacts_path)
        if raw is None:
            return demo_contacts() if self.is_demo else []
        return [Contact.from_dict(item) for item in raw if isinstance(item, dict)]

    def save_contacts(self, contacts: list[Contact]) -> None:
        self._write(self.contacts_path, [c.to_dict() for c in contacts])

    def add_contacts(self, new: list[Contact]) -> tuple[int, int]:
        """Append contacts, skipping names already stored. Returns (added, skipped)."""
        contacts = self.load_contacts()
        names = {c.name for c in contacts}
        added = skipped = 0
        now = datetime.now(timezone.utc).isoformat()
        for c in new:
            if c.name in names:
                skipped += 1
                continue
            c.slug = c.slug or create_contact_slug(c.name, c.id)
            c.initials = c.initials or generate_initials(c.name)
            c.created_at = c.created_at or now
            c.updated_at = now
            contacts.append(c)
            names.add(c.name)
            added += 1
        self.save_contacts(contacts)
        return added, skipped

    # ── Circles ────────────────────────────────────────────────────────────────

    def load_circles(self) -> list[CircleSetting]:
        raw = self._read_list(self.circles_path)
        if not raw:
            return default_circle_settings()
        return pad_circles([CircleSetting.from_dict(item) for item in raw if isinstance(item, dict)])

    def save_circles(self, circles: list[CircleSetting]) -> None:
        self._write(self.circles_path, [c.to_dict() for c in circles])


def advance_next_meets(contacts: list[Contact], now: date | None = None) -> list[Contact]:
    """Move recurring next-meet dates forward in place; return the contacts that changed."""
    moved: list[Contact] = []
    for c in contacts:
        effective, did_advance = resolve_effective_next_meet(c.next_meet_date, c.next_meet_cadence, now)
        if effective is None or not did_advance:
            continue
        new_value = format_calendar_date(effective)
        logger.debug("%s: next meet %s -> %s", c.id, c.next_meet_date, new_value)
        c.next_meet_date = new_value
        moved.append(c)
    return moved
