
from sqlalchemy import Column, String, ForeignKey, UniqueConstraint
from kb.db.session import Base
from kb.models.base import new_id

class Tag(Base):
    __tablename__ = "tags"
    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_tags_user_name"),
    )


class NoteTag(Base):
    __tablename__ = "note_tags"
    note_id = Column(String(36), ForeignKey("notes.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True)
