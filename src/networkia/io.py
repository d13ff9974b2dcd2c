from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path

import phonenumbers
import vobject
from phonenumbers import NumberParseException

from .model import Contact, ProfileField

logger = logging.getLogger(__name__)

# ── Pre-parse sanitisation ─────────────────────────────────────────────────────
#
# iCloud exports group properties as ``itemN.PROP`` and attach Apple-only
# ``itemN.X-*`` labels, which vobject's parser chokes on.

_ITEM_X_PROP = re.compile(r"^item\d+\.X-", re.IGNORECASE)
_ITEM_PREFIX = re.compile(r"^item\d+\.+", re.IGNORECASE)

_MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

# --MMDD, --MM-DD, YYYYMMDD, YYYY-MM-DD (time part ignored)
_BDAY_PATTERNS = (
    re.compile(r"^--(\d{2})-?(\d{2})$"),
    re.compile(r"^\d{4}-?(\d{2})-?(\d{2})(?:T.*)?$"),
)


def _sanitise_vcf(data: str, source_label: str) -> str:
    out: list[str] = []
    dropped = fixed = 0
    for line in data.splitlines(keepends=True):
        if _ITEM_X_PROP.match(line):
            dropped += 1
            continue
        if _ITEM_PREFIX.match(line):
            line = _ITEM_PREFIX.sub("", line)
            fixed += 1
        out.append(line)
    if dropped or fixed:
        logger.debug("%s: %d line(s) fixed, %d dropped", source_label, fixed, dropped)
    return "".join(out)


# ── Field conversion ───────────────────────────────────────────────────────────

def _text(prop) -> str | None:
    if prop is None:
        return None
    value = prop.value
    if isinstance(value, list):
        value = " ".join(str(v) for v in value if v)
    value = str(value).strip()
    return value or None


def format_phone(raw: str, region: str) -> str:
    """Pretty international format (+1 415-555-0100); unparseable input is returned unchanged."""
    try:
        parsed = phonenumbers.parse(raw, region)
    except NumberParseException:
        return raw
    if not phonenumbers.is_valid_number(parsed):
        return raw
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.INTERNATIONAL)


def bday_to_month_day(value: str | None) -> str | None:
    """Convert a vCard BDAY into the "Month Day" text the birthday field holds."""
    if not value:
        return None
    value = value.strip()
    for pat in _BDAY_PATTERNS:
        m = pat.match(value)
        if m:
            month, day = int(m.group(1)), int(m.group(2))
            if 1 <= month <= 12 and 1 <= day <= 31:
                return f"{_MONTH_NAMES[month - 1]} {day}"
    return None


def _org_text(vc) -> str | None:
    org = getattr(vc, "org", None)
    if org is None:
        return None
    parts = org.value if isinstance(org.value, list) else [org.value]
    joined = " ".join(str(p) for p in parts if p).strip()
    return joined or None


def vcard_to_contact(vc, default_region: str = "US") -> Contact | None:
    name = _text(getattr(vc, "fn", None)) or _org_text(vc)
    if not name:
        return None

    emails = [_text(e) for e in getattr(vc, "email_list", [])]
    tels = [_text(t) for t in getattr(vc, "tel_list", [])]
    email = next((e.lower() for e in emails if e), None)
    phone = next((format_phone(t, default_region) for t in tels if t), None)

    tags: list[str] = []
    for cats in getattr(vc, "categories_list", []):
        values = cats.value if isinstance(cats.value, list) else str(cats.value).split(",")
        tags.extend(str(v).strip() for v in values if str(v).strip())

    fields: list[ProfileField] = []
    birthday = bday_to_month_day(_text(getattr(vc, "bday", None)))
    if birthday:
        fields.append(ProfileField(id="birthday", label="Birthday", value=birthday))

    return Contact(
        id=_text(getattr(vc, "uid", None)) or uuid.uuid4().hex,
        name=name,
        email=email,
        phone=phone,
        company=_org_text(vc),
        title=_text(getattr(vc, "title", None)),
        tags=sorted(set(tags)),
        profile_fields=fields,
        personal_notes=_text(getattr(vc, "note", None)),
    )


# ── Public API ─────────────────────────────────────────────────────────────────

def read_contacts_from_vcf(paths: list[Path], default_region: str = "US") -> list[Contact]:
    """Parse .vcf files into contacts; cards without any name are skipped."""
    contacts: list[Contact] = []
    for p in paths:
        raw = p.read_text(encoding="utf-8", errors="replace")
        data = _sanitise_vcf(raw, p.stem)
        for vc in vobject.readComponents(data, ignoreUnreadable=True):
            if vc.name.upper() != "VCARD":
                continue
            contact = vcard_to_contact(vc, default_region)
            if contact is None:
                logger.debug("%s: skipped card with no FN/ORG", p.stem)
                continue
            contacts.append(contact)
    return contacts


def collect_vcf_sources(source: Path) -> list[Path]:
    """Return ``source`` itself, or the .vcf files directly inside it, sorted by name."""
    if source.is_file():
        return [source]
    if not source.is_dir():
        return []
    return sorted(p for p in source.iterdir() if p.suffix.lower() == ".vcf")
