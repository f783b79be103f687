"""Scan the inbox for Google Alerts and store a content idea for each one."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from sqlmodel import Session

from myclinic.alerts.ideas import IdeaGenerator, build_content_idea
from myclinic.alerts.mailbox import MailboxClient
from myclinic.alerts.parser import extract_alert, parse_email
from myclinic.storage import repository

logger = logging.getLogger(__name__)


@dataclass
class IngestSummary:
    processed: int = 0
    skipped: int = 0
    errors: int = 0


class AlertIngestor:
    """Turns unread alert emails into pending content ideas.

    Every message that is looked at gets marked read, whether its idea was
    stored, skipped or failed, so a bad email is never picked up twice.
    Mailbox failures (MailSessionError) abort the whole run.
    """

    def __init__(
        self,
        mailbox: MailboxClient,
        generator: IdeaGenerator,
        session_factory: Callable[[], Session],
        *,
        sender: str,
        mailbox_name: str = "INBOX",
    ) -> None:
        self._mailbox = mailbox
        self._generator = generator
        self._session_factory = session_factory
        self._sender = sender
        self._mailbox_name = mailbox_name

    def run(self) -> IngestSummary:
        summary = IngestSummary()

        self._mailbox.select_mailbox(self._mailbox_name)
        uids = self._mailbox.search_unseen(self._sender)
        logger.info("Found %d unread Google Alerts", len(uids))

        if not uids:
            logger.info("No new alerts to process")
            return summary

        with self._session_factory() as session:
            for uid in uids:
                raw = self._mailbox.fetch_raw(uid)
                self._process_message(session, raw, summary)
                self._mailbox.mark_seen(uid)

        logger.info(
            "Summary: %d processed, %d skipped, %d errors",
            summary.processed,
            summary.skipped,
            summary.errors,
        )
        return summary

    def _process_message(self, session: Session, raw: bytes, summary: IngestSummary) -> None:
        try:
            alert = extract_alert(parse_email(raw))

            if not alert.is_genuine:
                logger.info("Skipped: not a Google Alert")
                summary.skipped += 1
                return

            if repository.idea_exists_for_message(session, alert.message_id):
                logger.info("Skipped: idea already stored for %s", alert.message_id)
                summary.skipped += 1
                return

            logger.info("Processing: %s", alert.query)
            brief = self._generator.generate(alert)
            repository.add_idea(session, build_content_idea(alert, brief))

            summary.processed += 1
            logger.info("Saved: %s", brief.suggested_title)
        except Exception as e:
            session.rollback()
            logger.error("Error processing email: %s", e)
            summary.errors += 1
