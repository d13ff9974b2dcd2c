"""Contact slugs, initials and lookup by id / slug / fuzzy name."""
from __future__ import annotations

import re
from collections.abc import Sequence

from rapidfuzz import fuzz, process

from .errors import ContactNotFound
from .model import Contact

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

# WRatio score a name needs before it counts as a match
NAME_MATCH_THRESHOLD = 70


def create_contact_slug(name: str, contact_id: str) -> str:
    base = _NON_ALNUM.sub("-", name.lower()).strip("-")
    suffix = contact_id[-4:]
    if not base:
        return f"contact-{suffix}"
    return f"{base}-{suffix}"


def matches_contact_slug(slug: str, contact: Contact) -> bool:
    normalized = slug.lower()
    if contact.slug and contact.slug.lower() == normalized:
        return True
    return create_contact_slug(contact.name, contact.id).lower() == normalized


def generate_initials(name: str) -> str:
    return "".join(word[0] for word in name.split() if word).upper()[:2]


def find_contact(contacts: Sequence[Contact], query: str) -> Contact:
    """Resolve ``query`` to one contact.

    Exact id or slug matches win; otherwise the closest name is used if it
    scores at least NAME_MATCH_THRESHOLD.
    """
    for c in contacts:
        if c.id == query or matches_contact_slug(query, c):
            return c

    names = {i: c.name for i, c in enumerate(contacts) if c.name}
    best = process.extractOne(
        query,
        names,
        scorer=fuzz.WRatio,
        processor=str.lower,
        score_cutoff=NAME_MATCH_THRESHOLD,
    )
    if best is None:
        raise ContactNotFound(query)
    _, _, idx = best
    return contacts[idx]
