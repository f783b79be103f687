"""Parse raw alert emails and extract the Alert record from them."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from datetime import datetime
from email import message_from_bytes, policy

from bs4 import BeautifulSoup
from dateutil import parser as dateparser

_SUBJECT_PATTERN = re.compile(r"Google Alert for:\s*(.+)", re.IGNORECASE)
_TEXT_URL = re.compile(r"https?://\S+", re.IGNORECASE)
_HTML_URL = re.compile(r"""https?://[^\s"'<>]+""", re.IGNORECASE)

SNIPPET_FALLBACK_LENGTH = 500


@dataclass
class ParsedEmail:
    """The parts of an email the ingestor looks at."""

    subject: str
    text: str
    html: str
    date: datetime | None
    message_id: str = ""


@dataclass
class Alert:
    """One Google Alert notification, reduced to what the idea prompt needs."""

    query: str
    url: str
    title: str
    snippet: str
    date: datetime | None
    message_id: str = ""

    @property
    def is_genuine(self) -> bool:
        return bool(self.query)

    def to_prompt_dict(self) -> dict:
        data = asdict(self)
        data.pop("message_id")
        data["date"] = self.date.isoformat() if self.date else None
        return data


def parse_email(raw: bytes) -> ParsedEmail:
    """Split a raw RFC 822 message into subject, bodies, date and Message-ID."""
    message = message_from_bytes(raw, policy=policy.default)

    text_part = message.get_body(preferencelist=("plain",))
    html_part = message.get_body(preferencelist=("html",))

    return ParsedEmail(
        subject=str(message.get("Subject", "")),
        text=text_part.get_content() if text_part is not None else "",
        html=html_part.get_content() if html_part is not None else "",
        date=_parse_date(message.get("Date")),
        message_id=str(message.get("Message-ID", "")).strip(),
    )


def extract_alert(email: ParsedEmail) -> Alert:
    """Apply the subject/body heuristics to build an Alert.

    A subject that is not ``Google Alert for: <query>`` yields an empty
    ``query``, which marks the email as not a genuine alert.
    """
    match = _SUBJECT_PATTERN.search(email.subject or "")
    query = match.group(1).strip() if match else ""

    url_match = _TEXT_URL.search(email.text) or _HTML_URL.search(email.html)
    url = url_match.group(0) if url_match else ""

    title = query
    snippet = email.text[:SNIPPET_FALLBACK_LENGTH]

    if email.html:
        soup = BeautifulSoup(email.html, "html.parser")
        heading = soup.find("h3")
        if heading is not None:
            title = heading.get_text().strip()
        paragraph = soup.find("p")
        if paragraph is not None:
            snippet = paragraph.get_text().strip()

    return Alert(
        query=query,
        url=url,
        title=title,
        snippet=snippet,
        date=email.date,
        message_id=email.message_id,
    )


def _parse_date(date_str: str | None) -> datetime | None:
    if not date_str:
        return None
    try:
        return dateparser.parse(str(date_str))
    except (ValueError, TypeError, OverflowError):
        return None
