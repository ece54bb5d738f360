from pydantic import BaseModel


class NoteItem(BaseModel):
    name: str
    text: str
