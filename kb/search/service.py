"""Substring search over a user's notes, optionally narrowed by tags.

Tag filtering uses AND semantics: a note must carry every requested tag.
Results are ordered by recency only; there is no relevance scoring.
"""
import logging

from sqlalchemy import select, exists, or_
from sqlalchemy.orm import Session

from kb.errors import ValidationError
from kb.models.note import Note
from kb.models.tag import NoteTag
from kb.notes.service import RECENT_FIRST

logger = logging.getLogger(__name__)


def search_notes(
    db: Session,
    owner_id: str,
    query: str = "",
    tag_ids: list[str] | None = None,
    include_archived: bool = False,
) -> list[Note]:
    query = query or ""
    tag_ids = list(dict.fromkeys(tag_ids or []))
    if not query.strip() and not tag_ids:
        raise ValidationError("A search needs a query or at least one tag")

    stmt = select(Note).where(Note.user_id == owner_id)
    if query.strip():
        stmt = stmt.where(
            or_(
                Note.title.icontains(query, autoescape=True),
                Note.content.icontains(query, autoescape=True),
            )
        )
    if not include_archived:
        stmt = stmt.where(Note.is_archived.is_(False))
    for tag_id in tag_ids:
        stmt = stmt.where(
            exists().where(NoteTag.note_id == Note.id, NoteTag.tag_id == tag_id)
        )

    notes = list(db.scalars(stmt.order_by(*RECENT_FIRST)))
    logger.debug("Search for user %s matched %d notes", owner_id, len(notes))
    return notes
