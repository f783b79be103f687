"""IMAP mailbox access for reading alert emails."""

from __future__ import annotations

import imaplib
import logging

from myclinic.exceptions import MailSessionError

logger = logging.getLogger(__name__)

SEEN_FLAG = "\\Seen"


class MailboxClient:
    """Wrapper around an IMAP4-over-SSL session addressed by message UID.

    Every IMAP or socket failure surfaces as MailSessionError.
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        *,
        timeout: float | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._user = user
        self._password = password
        self._timeout = timeout
        self._conn: imaplib.IMAP4_SSL | None = None

    def connect(self) -> None:
        try:
            self._conn = imaplib.IMAP4_SSL(self._host, self._port, timeout=self._timeout)
            self._conn.login(self._user, self._password)
        except (imaplib.IMAP4.error, OSError) as e:
            raise MailSessionError(f"Could not connect to {self._host}: {e}") from e
        logger.info("Connected to %s as %s", self._host, self._user)

    def select_mailbox(self, name: str = "INBOX") -> None:
        self._command("SELECT", lambda conn: conn.select(name))

    def search_unseen(self, sender: str) -> list[bytes]:
        """Return UIDs of unread messages from ``sender``."""
        data = self._command(
            "SEARCH",
            lambda conn: conn.uid("SEARCH", None, "UNSEEN", "FROM", f'"{sender}"'),
        )
        if not data or not data[0]:
            return []
        return data[0].split()

    def fetch_raw(self, uid: bytes) -> bytes:
        """Fetch the full message without setting the \\Seen flag."""
        data = self._command("FETCH", lambda conn: conn.uid("FETCH", uid, "(BODY.PEEK[])"))
        for item in data:
            if isinstance(item, tuple) and len(item) == 2:
                return item[1]
        raise MailSessionError(f"FETCH returned no body for message {uid!r}")

    def mark_seen(self, uid: bytes) -> None:
        self._command("STORE", lambda conn: conn.uid("STORE", uid, "+FLAGS", f"({SEEN_FLAG})"))

    def close(self) -> None:
        if self._conn is None:
            return
        try:
            if self._conn.state == "SELECTED":
                self._conn.close()
            self._conn.logout()
        except (imaplib.IMAP4.error, OSError) as e:
            logger.warning("Error closing mailbox session: %s", e)
        finally:
            self._conn = None

    def _command(self, name: str, call) -> list:
        if self._conn is None:
            raise MailSessionError(f"{name} called before connect()")
        try:
            status, data = call(self._conn)
        except (imaplib.IMAP4.error, OSError) as e:
            raise MailSessionError(f"IMAP {name} failed: {e}") from e
        if status != "OK":
            raise MailSessionError(f"IMAP {name} failed: {status} {data!r}")
        return data

    def __enter__(self) -> MailboxClient:
        self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
