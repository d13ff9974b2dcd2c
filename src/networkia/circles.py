from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

CIRCLE_SLOTS = 10

DEFAULT_CIRCLE_NAMES = ["Family", "Friend", "Relative", "Work", "Acquaintance"]


@dataclass
class CircleSetting:
    id: str
    name: str
    is_active: bool

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "isActive": self.is_active}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CircleSetting:
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name") or ""),
            is_active=bool(data.get("isActive", False)),
        )


def _empty_slot(index: int) -> CircleSetting:
    return CircleSetting(id=f"circle-{index + 1}", name="", is_active=False)


def default_circle_settings() -> list[CircleSetting]:
    out = [
        CircleSetting(id=f"circle-{i + 1}", name=name, is_active=True)
        for i, name in enumerate(DEFAULT_CIRCLE_NAMES)
    ]
    return pad_circles(out)


def pad_circles(circles: list[CircleSetting], slots: int = CIRCLE_SLOTS) -> list[CircleSetting]:
    """Fill up to ``slots`` entries with empty, inactive circles."""
    padded = [CircleSetting(**asdict(c)) for c in circles]
    for i in range(len(padded), slots):
        padded.append(_empty_slot(i))
    return padded


def active_circle_names(circles: list[CircleSetting]) -> list[str]:
    return [c.name for c in circles if c.is_active and c.name.strip()]
