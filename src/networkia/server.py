"""
server.py — local JSON API for the Networkia web client.

Endpoints:
  GET  /api/contacts          all contacts in the active storage scope
  GET  /api/next-meet         effective next meets (?today=YYYY-MM-DD)
  GET  /api/circles           circle settings, padded to ten slots
  GET  /api/calendar.ics      calendar download (text/calendar)
  POST /api/advance           persist advanced recurring next meets
"""
from __future__ import annotations

import json
import logging
from datetime import date
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import parse_qs, urlparse

from .calendar_export import MIME_TYPE, build_calendar_document
from .config import Paths, Settings
from .events import collect_calendar_events
from .report import next_meet_rows
from .store import ContactStore, advance_next_meets

logger = logging.getLogger(__name__)

PORT = 8421

# ── State shared with handler ──────────────────────────────────────────────────

_state: dict = {
    "store": None,                               # ContactStore
    "calendar_filename": "networkia-calendar.ics",
}


def _today_param(params: dict) -> date | None:
    raw = params.get("today", [""])[0]
    if not raw:
        return None
    return date.fromisoformat(raw)


# ── API handlers ───────────────────────────────────────────────────────────────

def _api_contacts() -> dict:
    store: ContactStore = _state["store"]
    contacts = store.load_contacts()
    return {"ok": True, "demo": store.is_demo, "contacts": [c.to_dict() for c in contacts]}


def _api_next_meet(params: dict) -> dict:
    try:
        today = _today_param(params)
    except ValueError:
        return {"ok": False, "error": "today must be YYYY-MM-DD"}
    rows = next_meet_rows(_state["store"].load_contacts(), today)
    return {"ok": True, "rows": rows, "total": len(rows)}


def _api_circles() -> dict:
    return {"ok": True, "circles": [c.to_dict() for c in _state["store"].load_circles()]}


def _api_advance(body: dict) -> dict:
    store: ContactStore = _state["store"]
    try:
        today = date.fromisoformat(body["today"]) if body.get("today") else None
    except (TypeError, ValueError):
        return {"ok": False, "error": "today must be YYYY-MM-DD"}
    contacts = store.load_contacts()
    moved = advance_next_meets(contacts, today)
    if moved:
        store.save_contacts(contacts)
    return {"ok": True, "advanced": [{"id": c.id, "nextMeetDate": c.next_meet_date} for c in moved]}


def _calendar_payload() -> bytes | None:
    """The .ics document for the active scope, or None when there is nothing to export."""
    events = collect_calendar_events(_state["store"].load_contacts())
    if not events:
        return None
    return build_calendar_document(events).encode("utf-8")


# ── Request handler ────────────────────────────────────────────────────────────

class NetworkiaHandler(BaseHTTPRequestHandler):

    def log_message(self, fmt, *args):
        logger.debug("%s - " + fmt, self.address_string(), *args)

    def _send_json(self, data: dict, status: int = 200):
        body = json.dumps(data).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Access-Control-Allow-Origin", "*")
        self.end_headers()
        self.wfile.write(body)

    def _send_calendar(self):
        payload = _calendar_payload()
        if payload is None:
            self._send_json({"error": "No calendar dates to export yet."}, 404)
            return
        self.send_response(200)
        self.send_header("Content-Type", MIME_TYPE)
        self.send_header("Content-Length", str(len(payload)))
        self.send_header(
            "Content-Disposition", f'attachment; filename="{_state["calendar_filename"]}"'
        )
        self.end_headers()
        self.wfile.write(payload)

    def do_OPTIONS(self):
        self.send_response(200)
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()

    def do_GET(self):
        parsed = urlparse(self.path)
        path = parsed.path
        params = parse_qs(parsed.query)

        if path == "/api/contacts":
            self._send_json(_api_contacts())
        elif path == "/api/next-meet":
            self._send_json(_api_next_meet(params))
        elif path == "/api/circles":
            self._send_json(_api_circles())
        elif path == "/api/calendar.ics":
            self._send_calendar()
        else:
            self._send_json({"error": "Not found"}, 404)

    def do_POST(self):
        length = int(self.headers.get("Content-Length", 0))
        body_raw = self.rfile.read(length)
        try:
            body = json.loads(body_raw) if body_raw else {}
        except ValueError:
            self._send_json({"error": "Invalid JSON"}, 400)
            return

        path = urlparse(self.path).path
        if path == "/api/advance":
            self._send_json(_api_advance(body if isinstance(body, dict) else {}))
        else:
            self._send_json({"error": "Not found"}, 404)


# ── Entry point ────────────────────────────────────────────────────────────────

def make_server(paths: Paths, settings: Settings, host: str = "127.0.0.1", port: int = PORT) -> HTTPServer:
    _state["store"] = ContactStore.for_settings(paths.data_dir, settings)
    _state["calendar_filename"] = settings.calendar_filename

    class _Server(HTTPServer):
        allow_reuse_address = True

    return _Server((host, port), NetworkiaHandler)


def run(paths: Paths, settings: Settings, port: int = PORT) -> None:
    server = make_server(paths, settings, port=port)
    scope = "demo" if _state["store"].is_demo else settings.owner_email
    print(f"\n  Networkia API  (scope: {scope})")
    print(f"  Data dir : {paths.data_dir}")
    print(f"\n  http://localhost:{server.server_address[1]}\n")
    print("  Press Ctrl-C to stop\n")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\n  Bye.\n")
    finally:
        server.server_close()
