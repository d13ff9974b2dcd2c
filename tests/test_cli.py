from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from networkia.cli import app
from networkia.config import ensure_workspace
from networkia.model import Contact, ProfileField
from networkia.store import ContactStore

runner = CliRunner()


def _demo_store(root: Path) -> ContactStore:
    paths, settings = ensure_workspace(root)
    return ContactStore.for_settings(paths.data_dir, settings)


def test_export_calendar_nothing_to_export(tmp_path: Path):
    # demo contacts carry no dates
    result = runner.invoke(app, ["export-calendar", "--workspace", str(tmp_path)])
    assert result.exit_code == 2
    assert "Nothing to export" in result.output
    assert not (tmp_path / "exports" / "networkia-calendar.ics").exists()


def test_export_calendar_writes_file(tmp_path: Path):
    _demo_store(tmp_path).save_contacts([
        Contact(id="c1", name="Ed", profile_fields=[ProfileField(id="birthday", label="Birthday", value="Aug 18")]),
    ])
    result = runner.invoke(app, ["export-calendar", "--workspace", str(tmp_path)])
    assert result.exit_code == 0, result.output
    out = tmp_path / "exports" / "networkia-calendar.ics"
    assert b"SUMMARY:Birthday: Ed\r\n" in out.read_bytes()


def test_next_meet_lists_advanced_dates(tmp_path: Path):
    _demo_store(tmp_path).save_contacts([
        Contact(id="c1", name="Ed", next_meet_date="2024-01-10", next_meet_cadence="weekly"),
    ])
    result = runner.invoke(app, ["next-meet", "--workspace", str(tmp_path), "--today", "2024-01-24"])
    assert result.exit_code == 0, result.output
    assert "2024-01-31" in result.output


def test_next_meet_bad_today(tmp_path: Path):
    result = runner.invoke(app, ["next-meet", "--workspace", str(tmp_path), "--today", "tomorrow"])
    assert result.exit_code == 2


def test_advance_saves_unless_dry_run(tmp_path: Path):
    store = _demo_store(tmp_path)
    store.save_contacts([Contact(id="c1", name="Ed", next_meet_date="2024-01-10", next_meet_cadence="weekly")])
    args = ["advance", "--workspace", str(tmp_path), "--today", "2024-01-24"]

    result = runner.invoke(app, [*args, "--dry-run"])
    assert result.exit_code == 0, result.output
    assert store.load_contacts()[0].next_meet_date == "2024-01-10"

    result = runner.invoke(app, args)
    assert result.exit_code == 0, result.output
    assert store.load_contacts()[0].next_meet_date == "2024-01-31"


def test_import_vcf_and_show(tmp_path: Path):
    vcf = tmp_path / "cards.vcf"
    vcf.write_text("BEGIN:VCARD\nVERSION:3.0\nFN:Greta Gerwig\nBDAY:--0804\nEND:VCARD\n", encoding="utf-8")
    result = runner.invoke(app, ["import-vcf", str(vcf), "--workspace", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert "Imported 1" in result.output

    result = runner.invoke(app, ["show", "greta", "--workspace", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert "August 4" in result.output


def test_show_unknown_contact(tmp_path: Path):
    result = runner.invoke(app, ["show", "qqqq", "--workspace", str(tmp_path)])
    assert result.exit_code == 2


def test_circles(tmp_path: Path):
    result = runner.invoke(app, ["circles", "--workspace", str(tmp_path)])
    assert result.exit_code == 0
    assert "Acquaintance" in result.output
