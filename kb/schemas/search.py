
from pydantic import BaseModel, Field

class SearchIn(BaseModel):
    query: str = Field(default="", max_length=500)
    tags: list[str] | None = None
    include_archived: bool = False
