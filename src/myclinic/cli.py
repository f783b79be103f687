"""CLI entry point for the Meet Your Clinic content pipeline."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from myclinic import __version__

console = Console()
logger = logging.getLogger("myclinic")


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Google Alerts to blog drafts for Meet Your Clinic."""


# ---------------------------------------------------------------------------
# ingest — Google Alerts to content ideas
# ---------------------------------------------------------------------------


@main.command()
def ingest() -> None:
    """Turn unread Google Alert emails into pending content ideas."""
    from myclinic.alerts.ideas import IdeaGenerator
    from myclinic.alerts.ingestor import AlertIngestor
    from myclinic.alerts.mailbox import MailboxClient
    from myclinic.exceptions import MailSessionError
    from myclinic.llm.client import ClaudeClient
    from myclinic.storage.database import get_session

    settings = _load_settings("mail", "llm", "database")
    client = ClaudeClient(settings)
    mailbox = MailboxClient(
        settings.imap_host,
        settings.imap_port,
        settings.mail_user,
        settings.mail_password,
        timeout=settings.imap_timeout,
    )

    logger.info("Starting content automation...")
    try:
        with mailbox:
            ingestor = AlertIngestor(
                mailbox,
                IdeaGenerator(client, brand=settings.author_name),
                lambda: get_session(settings.database_uri),
                sender=settings.alert_sender,
                mailbox_name=settings.mailbox,
            )
            summary = ingestor.run()
    except MailSessionError as e:
        console.print(f"[bold red]Mailbox error:[/bold red] {e}")
        raise SystemExit(1)

    console.print(
        f"[green]Processed:[/green] {summary.processed}  "
        f"[yellow]Skipped:[/yellow] {summary.skipped}  "
        f"[red]Errors:[/red] {summary.errors}"
    )
    logger.debug("Token usage: %s", client.usage_summary)


# ---------------------------------------------------------------------------
# write — pending ideas to draft posts
# ---------------------------------------------------------------------------


@main.command()
def write() -> None:
    """Draft blog posts for the highest-priority pending ideas."""
    from myclinic.llm.client import ClaudeClient
    from myclinic.posts.generator import PostGenerator
    from myclinic.posts.writer import PostWriter
    from myclinic.storage.database import get_session

    settings = _load_settings("llm", "database")
    client = ClaudeClient(settings)
    generator = PostGenerator(
        client,
        brand=settings.author_name,
        default_word_count=settings.default_word_count,
    )
    writer = PostWriter(
        generator,
        lambda: get_session(settings.database_uri),
        batch_size=settings.posts_per_run,
        author_name=settings.author_name,
    )

    logger.info("Starting blog post generation...")
    summary = writer.run()

    console.print(
        f"[green]Written:[/green] {summary.written}  [red]Errors:[/red] {summary.errors}"
    )
    logger.debug("Token usage: %s", client.usage_summary)


# ---------------------------------------------------------------------------
# ideas — show the pending queue
# ---------------------------------------------------------------------------


@main.command()
def ideas() -> None:
    """List pending content ideas in the order `write` will take them."""
    from sqlmodel import func, select

    from myclinic.storage.database import get_session
    from myclinic.storage.models import IDEA_PENDING, ContentIdea
    from myclinic.storage.repository import pending_ideas

    settings = _load_settings("database")

    with get_session(settings.database_uri) as session:
        total = session.exec(
            select(func.count()).select_from(ContentIdea).where(ContentIdea.status == IDEA_PENDING)
        ).one()
        queue = pending_ideas(session, max(total, 1))

        if not queue:
            console.print("[yellow]No pending ideas. Run 'myclinic ingest' first.[/yellow]")
            return

        table = Table(title=f"Pending Ideas ({total})")
        table.add_column("ID", width=5, justify="right")
        table.add_column("Score", width=6, justify="right")
        table.add_column("Title", width=60)
        table.add_column("Topic", width=20)
        table.add_column("Query", width=25)
        for i, idea in enumerate(queue):
            style = "bold" if i < settings.posts_per_run else ""
            table.add_row(
                str(idea.id),
                f"{idea.seo_priority_score:g}",
                idea.suggested_title[:60],
                (idea.topic or "")[:20],
                idea.alert_query[:25],
                style=style,
            )
    console.print(table)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_settings(*groups: str):
    """Load settings, set up logging and exit with a helpful message if values are missing."""
    from myclinic.config import get_settings
    from myclinic.exceptions import StartupConfigError

    settings = get_settings()
    _configure_logging(settings.log_level)
    try:
        settings.require(*groups)
    except StartupConfigError as e:
        console.print(f"[bold red]Error:[/bold red] {e}\nSet them in the environment or .env.")
        raise SystemExit(1)
    return settings
