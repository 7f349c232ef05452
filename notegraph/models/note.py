# notegraph/models/note.py
from pydantic import BaseModel, Field

class NoteRecord(BaseModel):
    """The slice of a stored note the graph engine needs."""
    id: str
    title: str
    tags: list[str] = Field(default_factory=list)
    outgoing_links: list[str] = Field(default_factory=list)
    description: str = ""

class Link(BaseModel):
    """A `[[Target]]` or `[[Target|Alias]]` reference found in a note body."""
    source_title: str | None = None
    target_title: str
    display_text: str
    raw_match: str
    position: int
    end: int

class ParseRequest(BaseModel):
    text: str
    source_title: str | None = None

class RenameRequest(BaseModel):
    old_title: str
    new_title: str

class RenameResult(BaseModel):
    updated: int
