from notes_service.schemas.note import NoteItem

__all__ = [
    "NoteItem",
]
