from __future__ import annotations


class NetworkiaError(Exception):
    """Base class for user-facing errors."""


class NothingToExport(NetworkiaError):
    def __init__(self, message: str = "No calendar dates to export yet."):
        super().__init__(message)


class ContactNotFound(NetworkiaError):
    def __init__(self, query: str):
        super().__init__(f"No contact matches {query!r}")
        self.query = query
