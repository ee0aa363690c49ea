
from pydantic import BaseModel, Field

class TagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)

class TagOut(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True

class TagWithCount(TagOut):
    note_count: int = 0

class TagAssignIn(BaseModel):
    note_id: str
    tag_id: str
