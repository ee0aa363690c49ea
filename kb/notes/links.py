"""Directed links between notes of a single owner."""
import logging

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kb.errors import NotFound, ValidationError
from kb.models.note import Note, NoteLink
from kb.notes.service import get_owned_note

logger = logging.getLogger(__name__)


def _require_pair(db: Session, owner_id: str, from_id: str, to_id: str) -> None:
    if from_id == to_id:
        raise ValidationError("A note cannot link to itself")
    source = get_owned_note(db, owner_id, from_id)
    target = get_owned_note(db, owner_id, to_id)
    if source is None or target is None:
        raise NotFound("One or both notes not found")


def link_notes(db: Session, owner_id: str, from_id: str, to_id: str) -> None:
    """Add the edge ``from_id -> to_id``; an existing edge is left as is."""
    _require_pair(db, owner_id, from_id, to_id)
    if db.get(NoteLink, (from_id, to_id)) is not None:
        return
    db.add(NoteLink(from_note_id=from_id, to_note_id=to_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if db.get(NoteLink, (from_id, to_id)) is None:
            # an endpoint vanished between the check and the insert
            raise NotFound("One or both notes not found")
        logger.debug("Link %s -> %s already present", from_id, to_id)
        return
    logger.info("Linked note %s -> %s", from_id, to_id)


def unlink_notes(db: Session, owner_id: str, from_id: str, to_id: str) -> None:
    """Remove the edge if present. Both endpoints must belong to the owner."""
    if get_owned_note(db, owner_id, from_id) is None or get_owned_note(db, owner_id, to_id) is None:
        raise NotFound("One or both notes not found")
    db.execute(
        delete(NoteLink).where(
            NoteLink.from_note_id == from_id,
            NoteLink.to_note_id == to_id,
        )
    )
    db.commit()


def backlinks(db: Session, owner_id: str, note_id: str) -> dict[str, list[dict]]:
    """Outgoing and incoming neighbours of a note as ``{id, title}`` pairs."""
    if get_owned_note(db, owner_id, note_id) is None:
        raise NotFound("Note not found")

    outgoing = db.execute(
        select(Note.id, Note.title)
        .join(NoteLink, NoteLink.to_note_id == Note.id)
        .where(NoteLink.from_note_id == note_id, Note.user_id == owner_id)
        .order_by(Note.title)
    )
    incoming = db.execute(
        select(Note.id, Note.title)
        .join(NoteLink, NoteLink.from_note_id == Note.id)
        .where(NoteLink.to_note_id == note_id, Note.user_id == owner_id)
        .order_by(Note.title)
    )
    return {
        "outgoing": [{"id": i, "title": t} for i, t in outgoing],
        "incoming": [{"id": i, "title": t} for i, t in incoming],
    }
