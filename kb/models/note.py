
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Index
from kb.db.session import Base
from kb.models.base import new_id, utcnow

class Note(Base):
    __tablename__ = "notes"
    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")
    is_archived = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    # bumped explicitly on title/content edits only
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_notes_user_updated", "user_id", "updated_at"),
    )


class NoteLink(Base):
    __tablename__ = "note_links"
    from_note_id = Column(String(36), ForeignKey("notes.id", ondelete="CASCADE"), primary_key=True)
    to_note_id = Column(String(36), ForeignKey("notes.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
