
from datetime import datetime
from pydantic import BaseModel, Field
from kb.schemas.tag import TagOut

class NoteCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = ""

class NoteUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = None

class NoteOut(BaseModel):
    id: str
    title: str
    content: str
    is_archived: bool
    created_at: datetime
    updated_at: datetime
    tags: list[TagOut] = []

    class Config:
        from_attributes = True

class LinkedNote(BaseModel):
    id: str
    title: str

class NoteDetailOut(NoteOut):
    outgoing_links: list[LinkedNote] = []
    incoming_links: list[LinkedNote] = []

class NoteHtmlOut(BaseModel):
    id: str
    title: str
    html: str

class LinkIn(BaseModel):
    from_note_id: str
    to_note_id: str

class SuccessOut(BaseModel):
    success: bool = True
