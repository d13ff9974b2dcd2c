"""Tests for contact model, slugs, circles, store and vCard import."""
from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from networkia.circles import (
    CircleSetting,
    active_circle_names,
    default_circle_settings,
    pad_circles,
)
from networkia.errors import ContactNotFound
from networkia.io import (
    bday_to_month_day,
    collect_vcf_sources,
    format_phone,
    read_contacts_from_vcf,
)
from networkia.model import Contact, ProfileField
from networkia.slug import (
    create_contact_slug,
    find_contact,
    generate_initials,
    matches_contact_slug,
)
from networkia.store import ContactStore, advance_next_meets, storage_key

VCF = """BEGIN:VCARD
VERSION:3.0
FN:Edward Norton
EMAIL;TYPE=INTERNET:Ed.Norton@Example.com
TEL;TYPE=CELL:650-253-0000
ORG:Class 5 Films
TITLE:Director
BDAY:1969-08-18
CATEGORIES:Friend,Work
NOTE:Likes long conversations
UID:abc-123
item1.X-ABLabel:_$!<Other>!$_
END:VCARD
BEGIN:VCARD
VERSION:3.0
FN:Wes Anderson
BDAY:--0501
END:VCARD
"""


# ── helpers ────────────────────────────────────────────────────────────────────

def _contact(cid: str, name: str, **kwargs) -> Contact:
    return Contact(id=cid, name=name, **kwargs)


# ── Model ──────────────────────────────────────────────────────────────────────

def test_contact_json_round_trip():
    c = _contact(
        "c1", "Edward Norton",
        next_meet_date="2026-01-24", next_meet_cadence="monthly", tags=["Friend"],
        profile_fields=[ProfileField(id="birthday", label="Birthday", value="August 18", sub_value="Age 54")],
    )
    data = c.to_dict()
    assert data["nextMeetDate"] == "2026-01-24"
    assert data["profileFields"][0]["subValue"] == "Age 54"
    assert Contact.from_dict(data) == c


def test_contact_from_dict_tolerates_junk():
    c = Contact.from_dict({"id": 7, "name": None, "tags": "Work", "profileFields": "nope"})
    assert c.id == "7"
    assert c.name == ""
    assert c.tags == []
    assert c.profile_fields == []


def test_contact_birthday_property():
    c = _contact("c1", "A", profile_fields=[ProfileField(id="birthday", label="Birthday", value="")])
    assert c.birthday is None
    c.profile_fields[0].value = "May 4"
    assert c.birthday == "May 4"


# ── Slugs / lookup ─────────────────────────────────────────────────────────────

def test_create_contact_slug():
    assert create_contact_slug("Edward Norton", "abc123xyz9") == "edward-norton-xyz9"
    assert create_contact_slug("  O'Brien & Co.  ", "id-42") == "o-brien-co-d-42"


def test_create_contact_slug_empty_base():
    assert create_contact_slug("!!!", "id-0001") == "contact-0001"


def test_matches_contact_slug():
    c = _contact("abc123xyz9", "Edward Norton")
    assert matches_contact_slug("EDWARD-NORTON-xyz9", c)
    c.slug = "ed"
    assert matches_contact_slug("Ed", c)
    assert not matches_contact_slug("someone-else", c)


def test_generate_initials():
    assert generate_initials("edward norton") == "EN"
    assert generate_initials("Cher") == "C"
    assert generate_initials("Anna Maria  Lopez") == "AM"


def test_find_contact_exact_and_fuzzy():
    contacts = [_contact("demo-1", "Sarah Chen"), _contact("demo-2", "James Wilson")]
    assert find_contact(contacts, "demo-2").name == "James Wilson"
    assert find_contact(contacts, "sarah-chen-mo-1").id == "demo-1"
    assert find_contact(contacts, "sarah").id == "demo-1"
    with pytest.raises(ContactNotFound):
        find_contact(contacts, "zzzz")


# ── Circles ────────────────────────────────────────────────────────────────────

def test_default_circles():
    circles = default_circle_settings()
    assert len(circles) == 10
    assert active_circle_names(circles) == ["Family", "Friend", "Relative", "Work", "Acquaintance"]
    assert circles[9] == CircleSetting(id="circle-10", name="", is_active=False)


def test_pad_circles_does_not_mutate_input():
    given = [CircleSetting(id="x", name="Climbing", is_active=True)]
    padded = pad_circles(given)
    assert len(given) == 1
    assert len(padded) == 10
    assert padded[1].id == "circle-2"


def test_active_circle_names_skips_blank():
    circles = [CircleSetting("a", "  ", True), CircleSetting("b", "Work", False), CircleSetting("c", "Gym", True)]
    assert active_circle_names(circles) == ["Gym"]


# ── Store ──────────────────────────────────────────────────────────────────────

def test_storage_key():
    assert storage_key(None, "demo_contacts", "live_contacts_") == "demo_contacts"
    assert storage_key("me@x.com", "demo_contacts", "live_contacts_") == "live_contacts_me@x.com"


def test_demo_store_seeds_sample_contacts(tmp_path: Path):
    store = ContactStore(tmp_path, "demo_contacts", is_demo=True)
    names = [c.name for c in store.load_contacts()]
    assert names == ["Sarah Chen", "James Wilson", "Maria Garcia"]


def test_live_store_starts_empty(tmp_path: Path):
    assert ContactStore(tmp_path, "live_contacts_me@x.com").load_contacts() == []


def test_store_round_trip(tmp_path: Path):
    store = ContactStore(tmp_path, "live_contacts_me@x.com")
    c = _contact("c1", "Ed", next_meet_date="2026-01-24", next_meet_cadence="weekly")
    store.save_contacts([c])
    assert store.contacts_path.name == "live_contacts_me@x.com.contacts.json"
    assert store.load_contacts() == [c]


def test_store_malformed_file_loads_empty(tmp_path: Path):
    store = ContactStore(tmp_path, "live")
    store.contacts_path.write_text("{not json", encoding="utf-8")
    assert store.load_contacts() == []
    store.contacts_path.write_text(json.dumps({"a": 1}), encoding="utf-8")
    assert store.load_contacts() == []


def test_store_add_contacts_skips_existing_names(tmp_path: Path):
    store = ContactStore(tmp_path, "live")
    store.save_contacts([_contact("c1", "Sarah Chen")])
    added, skipped = store.add_contacts([_contact("c2", "Sarah Chen"), _contact("c3abcd", "New Person")])
    assert (added, skipped) == (1, 1)
    stored = store.load_contacts()
    assert [c.name for c in stored] == ["Sarah Chen", "New Person"]
    assert stored[1].slug == "new-person-abcd"
    assert stored[1].initials == "NP"
    assert stored[1].created_at


def test_store_circles_default_and_padded(tmp_path: Path):
    store = ContactStore(tmp_path, "live")
    assert len(store.load_circles()) == 10
    store.save_circles([CircleSetting(id="db-1", name="Climbing", is_active=True)])
    circles = store.load_circles()
    assert circles[0].name == "Climbing"
    assert len(circles) == 10


def test_advance_next_meets_only_moves_recurring_past_dates():
    contacts = [
        _contact("a", "Weekly", next_meet_date="2024-01-10", next_meet_cadence="weekly"),
        _contact("b", "One-off", next_meet_date="2024-01-10"),
        _contact("c", "Future", next_meet_date="2024-03-01", next_meet_cadence="monthly"),
        _contact("d", "Broken", next_meet_date="soon", next_meet_cadence="weekly"),
    ]
    moved = advance_next_meets(contacts, date(2024, 1, 24))
    assert [c.id for c in moved] == ["a"]
    assert contacts[0].next_meet_date == "2024-01-31"
    assert contacts[1].next_meet_date == "2024-01-10"
    assert contacts[2].next_meet_date == "2024-03-01"


# ── vCard import ───────────────────────────────────────────────────────────────

def test_read_contacts_from_vcf(tmp_path: Path):
    vcf = tmp_path / "icloud.vcf"
    vcf.write_text(VCF, encoding="utf-8")
    ed, wes = read_contacts_from_vcf([vcf], default_region="US")

    assert ed.id == "abc-123"
    assert ed.name == "Edward Norton"
    assert ed.email == "ed.norton@example.com"
    assert ed.phone == "+1 650-253-0000"
    assert ed.company == "Class 5 Films"
    assert ed.title == "Director"
    assert ed.tags == ["Friend", "Work"]
    assert ed.birthday == "August 18"
    assert ed.personal_notes == "Likes long conversations"

    assert wes.birthday == "May 1"
    assert wes.id                     # generated


@pytest.mark.parametrize("value,expected", [
    ("1969-08-18", "August 18"),
    ("19690818", "August 18"),
    ("--0818", "August 18"),
    ("--08-18", "August 18"),
    ("1969-08-18T00:00:00Z", "August 18"),
    ("1969-13-01", None),
    ("sometime", None),
    (None, None),
])
def test_bday_to_month_day(value, expected):
    assert bday_to_month_day(value) == expected


def test_format_phone_invalid_left_unchanged():
    assert format_phone("not-a-number", "US") == "not-a-number"


def test_collect_vcf_sources(tmp_path: Path):
    (tmp_path / "icloud.vcf").write_text("")
    (tmp_path / "google.VCF").write_text("")
    (tmp_path / "notes.txt").write_text("")
    sources = collect_vcf_sources(tmp_path)
    assert [p.name for p in sources] == ["google.VCF", "icloud.vcf"]
    assert collect_vcf_sources(tmp_path / "icloud.vcf") == [tmp_path / "icloud.vcf"]
    assert collect_vcf_sources(tmp_path / "missing") == []
