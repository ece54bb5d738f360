from fastapi import Request

from notes_service.services.workspace import NoteRepository


def get_repository(request: Request) -> NoteRepository:
    return request.app.state.repository
