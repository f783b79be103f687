"""Shared test fixtures."""

from __future__ import annotations

from email.message import EmailMessage
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from sqlmodel import Session

from myclinic.config import Settings
from myclinic.llm.client import ClaudeClient
from myclinic.storage.database import _engines, get_session


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Create test settings backed by a temporary SQLite database."""
    return Settings(
        anthropic_api_key="test-key-not-real",
        mail_user="alerts@example.com",
        mail_password="app-password",
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        model="claude-sonnet-4-20250514",
        fast_model="claude-3-5-haiku-20241022",
        max_tokens=1024,
        temperature=0.7,
    )


@pytest.fixture
def session_factory(settings: Settings):
    """Callable returning fresh sessions on the test database."""
    yield lambda: get_session(settings.database_uri)
    _engines.clear()


@pytest.fixture
def session(session_factory) -> Session:
    with session_factory() as s:
        yield s


@pytest.fixture
def mock_claude_client(settings: Settings) -> ClaudeClient:
    """Create a ClaudeClient with a mocked Anthropic SDK."""
    client = ClaudeClient(settings)
    # Replace the internal Anthropic client with a mock
    mock_anthropic = MagicMock()
    client._client = mock_anthropic
    return client


def make_mock_response(text: str, input_tokens: int = 100, output_tokens: int = 200):
    """Helper to create a mock Anthropic API response."""
    mock_response = MagicMock()
    mock_response.content = [MagicMock(text=text)]
    mock_response.usage.input_tokens = input_tokens
    mock_response.usage.output_tokens = output_tokens
    return mock_response


def make_alert_email(
    subject: str = "Google Alert for: dental implants",
    text: str | None = "New clinic story https://example.com/clinic more text",
    html: str | None = "<h3>New Dental Clinic</h3><p>A new clinic opened...</p>",
    message_id: str = "<alert-1@google.com>",
    date: str = "Wed, 14 Oct 2026 08:00:00 +0000",
) -> bytes:
    """Build a raw multipart alert email."""
    msg = EmailMessage()
    msg["From"] = "Google Alerts <googlealerts-noreply@google.com>"
    msg["To"] = "alerts@example.com"
    msg["Subject"] = subject
    msg["Date"] = date
    if message_id:
        msg["Message-ID"] = message_id
    if text is not None:
        msg.set_content(text)
    if html is not None:
        if text is not None:
            msg.add_alternative(html, subtype="html")
        else:
            msg.set_content(html, subtype="html")
    return msg.as_bytes()
