#!/usr/bin/env python3
"""networkia — personal relationship manager.  Run with:  python3 start.py <command>"""
import sys
import os
from pathlib import Path

script_dir = os.path.dirname(os.path.abspath(__file__))
src_dir    = os.path.join(script_dir, "src")

sys.path.insert(0, src_dir)
os.chdir(script_dir)

# ── First-run detection ───────────────────────────────────────────────────────
# Show a welcome message until a contact store exists under data/
def _first_run() -> bool:
    data_dir = Path(script_dir) / "data"
    return not data_dir.is_dir() or not any(data_dir.glob("*.contacts.json"))

def _welcome() -> None:
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    console = Console()
    console.print()
    console.print(Panel(
        Text.from_markup(
            "[bold #4d9fff]Welcome to Networkia[/]\n\n"
            "You're in [bold]demo mode[/] until you set [bold]owner_email[/] in local/networkia.conf.\n\n"
            "  [bold #4d9fff]python3 start.py import-vcf cards/[/]   import contacts from .vcf exports\n"
            "  [bold #4d9fff]python3 start.py next-meet[/]           see who you're meeting next\n"
            "  [bold #3ecf8e]python3 start.py export-calendar[/]     write exports/networkia-calendar.ics"
        ),
        title=Text("  Getting Started  ", style="dim #546075"),
        title_align="left",
        border_style="#2a3347",
        padding=(1, 2),
    ))
    console.print()

if _first_run():
    _welcome()

from networkia.cli import app
app()
