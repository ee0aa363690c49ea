
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from kb.auth.deps import get_db, get_current_user
from kb.models.user import User
from kb.notes.service import with_tags
from kb.schemas.note import NoteOut
from kb.schemas.search import SearchIn
from kb.search.service import search_notes

router = APIRouter(prefix="/search", tags=["search"])

@router.post("/notes", response_model=list[NoteOut])
def search(body: SearchIn, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    notes = search_notes(db, user.id, body.query, body.tags, body.include_archived)
    return with_tags(db, notes)
