"""Tag store and the note/tag association."""
import logging

from sqlalchemy import select, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kb.errors import Conflict, NotFound, ValidationError
from kb.models.tag import Tag, NoteTag
from kb.notes.service import get_owned_note

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 50


def _get_owned_tag(db: Session, owner_id: str, tag_id: str) -> Tag | None:
    return db.scalar(select(Tag).where(Tag.id == tag_id, Tag.user_id == owner_id))


def create_tag(db: Session, owner_id: str, name: str) -> Tag:
    if not name or not 1 <= len(name) <= NAME_MAX_LENGTH:
        raise ValidationError(f"Tag name must be 1-{NAME_MAX_LENGTH} characters")
    if db.scalar(select(Tag.id).where(Tag.user_id == owner_id, Tag.name == name)):
        raise Conflict("Tag already exists")

    tag = Tag(user_id=owner_id, name=name)
    db.add(tag)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Tag already exists")
    db.refresh(tag)
    logger.info("Created tag %s for user %s", tag.id, owner_id)
    return tag


def list_tags(db: Session, owner_id: str) -> list[dict]:
    """Tags ordered by name, each with the number of notes carrying it."""
    rows = db.execute(
        select(Tag.id, Tag.name, func.count(NoteTag.note_id).label("note_count"))
        .outerjoin(NoteTag, NoteTag.tag_id == Tag.id)
        .where(Tag.user_id == owner_id)
        .group_by(Tag.id, Tag.name)
        .order_by(Tag.name)
    )
    return [{"id": r.id, "name": r.name, "note_count": r.note_count} for r in rows]


def delete_tag(db: Session, owner_id: str, tag_id: str) -> None:
    tag = _get_owned_tag(db, owner_id, tag_id)
    if tag is None:
        raise NotFound("Tag not found")
    db.execute(delete(NoteTag).where(NoteTag.tag_id == tag.id))
    db.delete(tag)
    db.commit()
    logger.info("Deleted tag %s for user %s", tag_id, owner_id)


def _require_note_and_tag(db: Session, owner_id: str, note_id: str, tag_id: str) -> None:
    if get_owned_note(db, owner_id, note_id) is None:
        raise NotFound("Note not found")
    if _get_owned_tag(db, owner_id, tag_id) is None:
        raise NotFound("Tag not found")


def assign_tag(db: Session, owner_id: str, note_id: str, tag_id: str) -> None:
    _require_note_and_tag(db, owner_id, note_id, tag_id)
    if db.get(NoteTag, (note_id, tag_id)) is not None:
        return
    db.add(NoteTag(note_id=note_id, tag_id=tag_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if db.get(NoteTag, (note_id, tag_id)) is None:
            raise NotFound("Note or tag not found")


def unassign_tag(db: Session, owner_id: str, note_id: str, tag_id: str) -> None:
    _require_note_and_tag(db, owner_id, note_id, tag_id)
    db.execute(delete(NoteTag).where(NoteTag.note_id == note_id, NoteTag.tag_id == tag_id))
    db.commit()
