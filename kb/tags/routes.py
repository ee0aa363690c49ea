
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from kb.auth.deps import get_db, get_current_user
from kb.models.user import User
from kb.schemas.tag import TagCreate, TagOut, TagWithCount, TagAssignIn
from kb.schemas.note import SuccessOut
from kb.tags import service

router = APIRouter(prefix="/tags", tags=["tags"])

@router.post("", response_model=TagOut, status_code=201)
def create_tag(body: TagCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return service.create_tag(db, user.id, body.name)

@router.get("", response_model=list[TagWithCount])
def list_tags(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return service.list_tags(db, user.id)

@router.post("/assign", response_model=SuccessOut)
def assign_to_note(body: TagAssignIn, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    service.assign_tag(db, user.id, body.note_id, body.tag_id)
    return SuccessOut()

@router.post("/remove", response_model=SuccessOut)
def remove_from_note(body: TagAssignIn, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    service.unassign_tag(db, user.id, body.note_id, body.tag_id)
    return SuccessOut()

@router.delete("/{tag_id}", response_model=SuccessOut)
def delete_tag(tag_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    service.delete_tag(db, user.id, tag_id)
    return SuccessOut()
