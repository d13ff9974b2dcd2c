from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class Paths:
    root: Path
    data_dir: Path
    export_dir: Path
    local_dir: Path
    conf_file: Path


@dataclass
class Settings:
    owner_email: str | None = None        # None = demo scope
    default_region: str = "US"
    calendar_filename: str = "networkia-calendar.ics"
    demo_key: str = "demo_contacts"
    live_key_prefix: str = "live_contacts_"


DEFAULT_CONF = """# networkia local config (TOML)
# owner_email = "you@example.com"   # set to use your own (live) contact store
default_region = "US"
calendar_filename = "networkia-calendar.ics"
"""


def ensure_workspace(base: Path | None = None) -> tuple[Paths, Settings]:
    root = Path(base or os.getcwd())
    data = root / "data"
    exports = root / "exports"
    local = root / "local"
    conf = local / "networkia.conf"

    for d in (data, exports, local):
        d.mkdir(parents=True, exist_ok=True)

    if not conf.exists():
        conf.write_text(DEFAULT_CONF, encoding="utf-8")

    settings = load_settings(conf)
    return (
        Paths(root=root, data_dir=data, export_dir=exports, local_dir=local, conf_file=conf),
        settings,
    )


def load_settings(conf: Path) -> Settings:
    settings = Settings()
    try:
        data = tomllib.loads(conf.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", conf, exc)
        return settings

    email = data.get("owner_email")
    if email and str(email).strip():
        settings.owner_email = str(email).strip()
    settings.default_region = str(data.get("default_region", settings.default_region))
    settings.calendar_filename = str(data.get("calendar_filename", settings.calendar_filename))
    settings.demo_key = str(data.get("demo_key", settings.demo_key))
    settings.live_key_prefix = str(data.get("live_key_prefix", settings.live_key_prefix))
    return settings
