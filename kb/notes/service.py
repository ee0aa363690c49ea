"""Note store: owner-scoped CRUD over notes.

Every function takes the caller's ``owner_id`` explicitly and filters on it.
A note that exists but belongs to another user is reported exactly like a
missing one.
"""
import logging
from collections import defaultdict
from typing import Iterable

from sqlalchemy import select, delete, or_
from sqlalchemy.orm import Session

from kb.errors import NotFound, ValidationError
from kb.models.base import utcnow
from kb.models.note import Note, NoteLink
from kb.models.tag import Tag, NoteTag

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 255

RECENT_FIRST = (Note.updated_at.desc(), Note.created_at.desc())


def _clean_title(title: str | None) -> str:
    if title is None or not title.strip():
        raise ValidationError("Title is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
    return title


def get_owned_note(db: Session, owner_id: str, note_id: str) -> Note | None:
    return db.scalar(select(Note).where(Note.id == note_id, Note.user_id == owner_id))


def create_note(db: Session, owner_id: str, title: str, content: str = "") -> Note:
    note = Note(user_id=owner_id, title=_clean_title(title), content=content or "")
    db.add(note)
    db.commit()
    db.refresh(note)
    logger.info("Created note %s for user %s", note.id, owner_id)
    return note


def get_note(db: Session, owner_id: str, note_id: str) -> Note:
    note = get_owned_note(db, owner_id, note_id)
    if note is None:
        raise NotFound("Note not found")
    return note


def list_notes(db: Session, owner_id: str, include_archived: bool = False) -> list[Note]:
    stmt = select(Note).where(Note.user_id == owner_id)
    if not include_archived:
        stmt = stmt.where(Note.is_archived.is_(False))
    return list(db.scalars(stmt.order_by(*RECENT_FIRST)))


def update_note(
    db: Session,
    owner_id: str,
    note_id: str,
    title: str | None = None,
    content: str | None = None,
) -> Note:
    """Partial update: only the fields that are not ``None`` change."""
    note = get_note(db, owner_id, note_id)
    if title is not None:
        note.title = _clean_title(title)
    if content is not None:
        note.content = content
    if title is not None or content is not None:
        note.updated_at = utcnow()
    db.commit()
    db.refresh(note)
    return note


def set_archived(db: Session, owner_id: str, note_id: str, archived: bool) -> Note:
    note = get_note(db, owner_id, note_id)
    if note.is_archived != archived:
        note.is_archived = archived
        db.commit()
        db.refresh(note)
        logger.debug("Note %s archived=%s", note.id, archived)
    return note


def archive_note(db: Session, owner_id: str, note_id: str) -> Note:
    return set_archived(db, owner_id, note_id, True)


def unarchive_note(db: Session, owner_id: str, note_id: str) -> Note:
    return set_archived(db, owner_id, note_id, False)


def delete_note(db: Session, owner_id: str, note_id: str) -> None:
    note = get_note(db, owner_id, note_id)
    db.execute(delete(NoteTag).where(NoteTag.note_id == note.id))
    db.execute(
        delete(NoteLink).where(
            or_(NoteLink.from_note_id == note.id, NoteLink.to_note_id == note.id)
        )
    )
    db.delete(note)
    db.commit()
    logger.info("Deleted note %s for user %s", note_id, owner_id)


def tags_by_note(db: Session, note_ids: Iterable[str]) -> dict[str, list[Tag]]:
    """Map each note id to its tags, alphabetically."""
    note_ids = list(note_ids)
    found: dict[str, list[Tag]] = defaultdict(list)
    if not note_ids:
        return found
    rows = db.execute(
        select(NoteTag.note_id, Tag)
        .join(Tag, Tag.id == NoteTag.tag_id)
        .where(NoteTag.note_id.in_(note_ids))
        .order_by(Tag.name)
    )
    for note_id, tag in rows:
        found[note_id].append(tag)
    return found


def with_tags(db: Session, notes: list[Note]) -> list[dict]:
    tags = tags_by_note(db, (n.id for n in notes))
    return [
        {
            "id": n.id,
            "title": n.title,
            "content": n.content,
            "is_archived": n.is_archived,
            "created_at": n.created_at,
            "updated_at": n.updated_at,
            "tags": [{"id": t.id, "name": t.name} for t in tags.get(n.id, [])],
        }
        for n in notes
    ]
