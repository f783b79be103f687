"""Tests for the alert ingest job."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from sqlmodel import select

from myclinic.alerts.ideas import IdeaGenerator
from myclinic.alerts.ingestor import AlertIngestor
from myclinic.exceptions import MailSessionError
from myclinic.llm.client import ClaudeClient
from myclinic.storage.models import ContentIdea
from tests.conftest import make_alert_email, make_mock_response

SENDER = "googlealerts-noreply@google.com"

IDEA_REPLY = json.dumps(
    {
        "suggested_title": "What a New Dental Clinic Means for Implant Patients",
        "target_keywords": ["dental implants"],
        "target_audience": "Implant patients",
        "search_intent": "informational",
        "suggested_outline": ["Intro", "Costs"],
        "word_count_estimate": 1500,
        "seo_priority_score": 7,
        "topic": "Dental",
        "urgency": "medium",
    }
)[1:]


class FakeMailbox:
    """In-memory stand-in for MailboxClient."""

    def __init__(self, messages: dict[bytes, bytes]) -> None:
        self.messages = messages
        self.seen: list[bytes] = []
        self.selected: str | None = None
        self.searched_sender: str | None = None

    def select_mailbox(self, name: str = "INBOX") -> None:
        self.selected = name

    def search_unseen(self, sender: str) -> list[bytes]:
        self.searched_sender = sender
        return [uid for uid in self.messages if uid not in self.seen]

    def fetch_raw(self, uid: bytes) -> bytes:
        return self.messages[uid]

    def mark_seen(self, uid: bytes) -> None:
        self.seen.append(uid)


def _ingestor(mailbox, client: ClaudeClient, session_factory) -> AlertIngestor:
    return AlertIngestor(mailbox, IdeaGenerator(client), session_factory, sender=SENDER)


def test_single_alert_end_to_end(
    mock_claude_client: ClaudeClient, session_factory, session
) -> None:
    mock_claude_client._client.messages.create.return_value = make_mock_response(IDEA_REPLY)
    mailbox = FakeMailbox({b"1": make_alert_email()})

    summary = _ingestor(mailbox, mock_claude_client, session_factory).run()

    assert (summary.processed, summary.skipped, summary.errors) == (1, 0, 0)
    assert mailbox.seen == [b"1"]
    assert mailbox.selected == "INBOX"
    assert mailbox.searched_sender == SENDER

    ideas = session.exec(select(ContentIdea)).all()
    assert len(ideas) == 1
    idea = ideas[0]
    assert idea.alert_query == "dental implants"
    assert idea.source_title == "New Dental Clinic"
    assert idea.source_snippet == "A new clinic opened..."
    assert idea.original_url == "https://example.com/clinic"
    assert idea.status == "pending"
    assert idea.target_keywords == ["dental implants"]
    assert idea.suggested_outline == ["Intro", "Costs"]
    assert idea.slug == "what-a-new-dental-clinic-means-for-implant-patients"


def test_non_alert_is_skipped_and_marked_read(
    mock_claude_client: ClaudeClient, session_factory, session
) -> None:
    mailbox = FakeMailbox({b"7": make_alert_email(subject="Your Google account settings")})

    summary = _ingestor(mailbox, mock_claude_client, session_factory).run()

    assert (summary.processed, summary.skipped, summary.errors) == (0, 1, 0)
    assert mailbox.seen == [b"7"]
    mock_claude_client._client.messages.create.assert_not_called()
    assert session.exec(select(ContentIdea)).all() == []


def test_bad_model_reply_counts_error_and_marks_read(
    mock_claude_client: ClaudeClient, session_factory, session
) -> None:
    mock_claude_client._client.messages.create.side_effect = [
        make_mock_response("this is not json"),
        make_mock_response(IDEA_REPLY),
    ]
    mailbox = FakeMailbox(
        {
            b"1": make_alert_email(message_id="<a@google.com>"),
            b"2": make_alert_email(
                subject="Google Alert for: hair transplant", message_id="<b@google.com>"
            ),
        }
    )

    summary = _ingestor(mailbox, mock_claude_client, session_factory).run()

    assert (summary.processed, summary.skipped, summary.errors) == (1, 0, 1)
    assert mailbox.seen == [b"1", b"2"]
    ideas = session.exec(select(ContentIdea)).all()
    assert [i.alert_query for i in ideas] == ["hair transplant"]


def test_store_failure_counts_error(mock_claude_client: ClaudeClient, session_factory) -> None:
    mock_claude_client._client.messages.create.return_value = make_mock_response(IDEA_REPLY)
    broken_session = MagicMock()
    broken_session.__enter__.return_value = broken_session
    broken_session.exec.return_value.first.return_value = None
    broken_session.commit.side_effect = RuntimeError("insert rejected")
    mailbox = FakeMailbox({b"1": make_alert_email()})

    ingestor = AlertIngestor(
        mailbox, IdeaGenerator(mock_claude_client), lambda: broken_session, sender=SENDER
    )
    summary = ingestor.run()

    assert (summary.processed, summary.errors) == (0, 1)
    assert mailbox.seen == [b"1"]
    broken_session.rollback.assert_called_once()


def test_rerun_with_nothing_unread_changes_nothing(
    mock_claude_client: ClaudeClient, session_factory, session
) -> None:
    mock_claude_client._client.messages.create.return_value = make_mock_response(IDEA_REPLY)
    mailbox = FakeMailbox({b"1": make_alert_email()})
    _ingestor(mailbox, mock_claude_client, session_factory).run()

    summary = _ingestor(mailbox, mock_claude_client, session_factory).run()

    assert (summary.processed, summary.skipped, summary.errors) == (0, 0, 0)
    assert len(session.exec(select(ContentIdea)).all()) == 1
    assert mock_claude_client._client.messages.create.call_count == 1


def test_empty_inbox_opens_no_session(mock_claude_client: ClaudeClient) -> None:
    factory = MagicMock()

    summary = _ingestor(FakeMailbox({}), mock_claude_client, factory).run()

    assert (summary.processed, summary.skipped, summary.errors) == (0, 0, 0)
    factory.assert_not_called()


def test_same_message_id_is_not_stored_twice(
    mock_claude_client: ClaudeClient, session_factory, session
) -> None:
    """A message left unread after its idea was stored is skipped, not duplicated."""
    mock_claude_client._client.messages.create.return_value = make_mock_response(IDEA_REPLY)
    raw = make_alert_email(message_id="<dup@google.com>")
    _ingestor(FakeMailbox({b"1": raw}), mock_claude_client, session_factory).run()

    summary = _ingestor(FakeMailbox({b"9": raw}), mock_claude_client, session_factory).run()

    assert (summary.processed, summary.skipped) == (0, 1)
    assert len(session.exec(select(ContentIdea)).all()) == 1


def test_mailbox_failure_aborts_run(mock_claude_client: ClaudeClient, session_factory) -> None:
    mailbox = FakeMailbox({b"1": make_alert_email()})
    mailbox.mark_seen = MagicMock(side_effect=MailSessionError("STORE failed"))
    mock_claude_client._client.messages.create.return_value = make_mock_response(IDEA_REPLY)

    with pytest.raises(MailSessionError):
        _ingestor(mailbox, mock_claude_client, session_factory).run()
