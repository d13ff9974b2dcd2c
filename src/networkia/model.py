from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date
from typing import Any, NamedTuple


class Cadence(str, enum.Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


class EffectiveNextMeet(NamedTuple):
    date: date | None
    did_advance: bool


@dataclass(frozen=True)
class CalendarEvent:
    uid: str
    summary: str
    date: date
    rrule: str | None = None


@dataclass
class ProfileField:
    id: str
    label: str
    value: str = ""
    sub_value: str | None = None
    type: str = "text"           # text | multi-line

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "label": self.label, "value": self.value, "type": self.type}
        if self.sub_value is not None:
            out["subValue"] = self.sub_value
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProfileField:
        return cls(
            id=str(data.get("id", "")),
            label=str(data.get("label", "")),
            value=str(data.get("value") or ""),
            sub_value=data.get("subValue"),
            type=str(data.get("type") or "text"),
        )


# (python attribute, JSON key) for the scalar fields stored by the web client
_JSON_FIELDS: list[tuple[str, str]] = [
    ("id", "id"),
    ("name", "name"),
    ("email", "email"),
    ("phone", "phone"),
    ("company", "company"),
    ("location", "location"),
    ("title", "title"),
    ("slug", "slug"),
    ("initials", "initials"),
    ("is_quick_contact", "isQuickContact"),
    ("last_contact", "lastContact"),
    ("next_meet_date", "nextMeetDate"),
    ("next_meet_cadence", "nextMeetCadence"),
    ("personal_notes", "personalNotes"),
    ("share_token", "shareToken"),
    ("is_shared", "isShared"),
    ("created_at", "createdAt"),
    ("updated_at", "updatedAt"),
]


@dataclass
class Contact:
    id: str
    name: str
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    location: str | None = None
    title: str | None = None
    slug: str | None = None
    initials: str | None = None
    tags: list[str] = field(default_factory=list)
    is_quick_contact: bool = False
    last_contact: str | None = None
    next_meet_date: str | None = None
    next_meet_cadence: str | None = None   # free text, see next_meet.normalize_cadence
    profile_fields: list[ProfileField] = field(default_factory=list)
    personal_notes: str | None = None
    share_token: str | None = None
    is_shared: bool = False
    created_at: str | None = None
    updated_at: str | None = None

    def profile_field(self, key: str) -> ProfileField | None:
        """Return the first profile field whose id or label matches ``key``."""
        key = key.lower()
        for f in self.profile_fields:
            if f.id.lower() == key or f.label.lower() == key:
                return f
        return None

    @property
    def birthday(self) -> str | None:
        f = self.profile_field("birthday")
        return f.value if f and f.value else None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for attr, key in _JSON_FIELDS:
            value = getattr(self, attr)
            if value is not None:
                out[key] = value
        out["tags"] = list(self.tags)
        if self.profile_fields:
            out["profileFields"] = [f.to_dict() for f in self.profile_fields]
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Contact:
        kwargs: dict[str, Any] = {}
        for attr, key in _JSON_FIELDS:
            if key in data:
                kwargs[attr] = data[key]
        kwargs["id"] = str(data.get("id", ""))
        kwargs["name"] = str(data.get("name") or "")
        kwargs["is_quick_contact"] = bool(data.get("isQuickContact", False))
        kwargs["is_shared"] = bool(data.get("isShared", False))
        tags = data.get("tags") or []
        kwargs["tags"] = [str(t) for t in tags] if isinstance(tags, list) else []
        fields = data.get("profileFields") or []
        kwargs["profile_fields"] = (
            [ProfileField.from_dict(f) for f in fields if isinstance(f, dict)]
            if isinstance(fields, list) else []
        )
        return cls(**kwargs)
