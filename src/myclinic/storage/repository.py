"""Row-store operations on content ideas and blog posts."""

from __future__ import annotations

from sqlmodel import Session, col, select

from myclinic.storage.models import IDEA_PENDING, IDEA_PROCESSED, BlogPost, ContentIdea


def add_idea(session: Session, idea: ContentIdea) -> ContentIdea:
    session.add(idea)
    session.commit()
    session.refresh(idea)
    return idea


def idea_exists_for_message(session: Session, message_id: str) -> bool:
    """True if an idea was already stored for this email's Message-ID."""
    if not message_id:
        return False
    statement = select(ContentIdea.id).where(ContentIdea.source_message_id == message_id)
    return session.exec(statement).first() is not None


def pending_ideas(session: Session, limit: int) -> list[ContentIdea]:
    """Highest ``seo_priority_score`` first."""
    statement = (
        select(ContentIdea)
        .where(ContentIdea.status == IDEA_PENDING)
        .order_by(col(ContentIdea.seo_priority_score).desc(), col(ContentIdea.id))
        .limit(limit)
    )
    return list(session.exec(statement).all())


def save_post_for_idea(session: Session, post: BlogPost, idea: ContentIdea) -> BlogPost:
    """Insert the draft and mark its idea processed in one transaction."""
    idea.status = IDEA_PROCESSED
    session.add(post)
    session.add(idea)
    session.commit()
    session.refresh(post)
    return post
