
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from kb.auth.deps import get_db, get_current_user
from kb.models.user import User
from kb.schemas.note import (
    NoteCreate, NoteUpdate, NoteOut, NoteDetailOut, NoteHtmlOut, LinkIn, SuccessOut,
)
from kb.notes import service, links
from kb.notes.render import render_note

router = APIRouter(prefix="/notes", tags=["notes"])

def _one(db: Session, note) -> dict:
    return service.with_tags(db, [note])[0]

@router.post("", response_model=NoteOut, status_code=201)
def create_note(body: NoteCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    note = service.create_note(db, user.id, body.title, body.content)
    return _one(db, note)

@router.get("", response_model=list[NoteOut])
def list_notes(include_archived: bool = False, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return service.with_tags(db, service.list_notes(db, user.id, include_archived))

# registered before "/{note_id}" routes so "links" is not read as an id
@router.post("/links", response_model=SuccessOut)
def link_notes(body: LinkIn, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    links.link_notes(db, user.id, body.from_note_id, body.to_note_id)
    return SuccessOut()

@router.delete("/links", response_model=SuccessOut)
def unlink_notes(body: LinkIn, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    links.unlink_notes(db, user.id, body.from_note_id, body.to_note_id)
    return SuccessOut()

@router.get("/{note_id}", response_model=NoteDetailOut)
def get_note(note_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    note = service.get_note(db, user.id, note_id)
    graph = links.backlinks(db, user.id, note_id)
    return {**_one(db, note), "outgoing_links": graph["outgoing"], "incoming_links": graph["incoming"]}

@router.get("/{note_id}/html", response_model=NoteHtmlOut)
def render(note_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    note = service.get_note(db, user.id, note_id)
    return NoteHtmlOut(id=note.id, title=note.title, html=str(render_note(db, note)))

@router.patch("/{note_id}", response_model=NoteOut)
def update_note(note_id: str, body: NoteUpdate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    note = service.update_note(db, user.id, note_id, title=body.title, content=body.content)
    return _one(db, note)

@router.post("/{note_id}/archive", response_model=NoteOut)
def archive_note(note_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return _one(db, service.archive_note(db, user.id, note_id))

@router.post("/{note_id}/unarchive", response_model=NoteOut)
def unarchive_note(note_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return _one(db, service.unarchive_note(db, user.id, note_id))

@router.delete("/{note_id}", response_model=SuccessOut)
def delete_note(note_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    service.delete_note(db, user.id, note_id)
    return SuccessOut()
