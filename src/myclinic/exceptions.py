"""Error types shared by the ingest and write jobs."""

from __future__ import annotations


class MyClinicError(Exception):
    """Base class for pipeline errors."""


class StartupConfigError(MyClinicError):
    """Required configuration is missing. Raised before any I/O happens."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required configuration: {', '.join(missing)}")


class MailSessionError(MyClinicError):
    """IMAP connection, login, search, fetch or flag update failed."""


class IdeaSchemaError(MyClinicError):
    """The model's idea response was not a JSON object matching IdeaBrief."""
