import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import PlainTextResponse
from slowapi import Limiter
from starlette.concurrency import run_in_threadpool

from notes_service.dependencies import get_repository
from notes_service.schemas.note import NoteItem
from notes_service.services.workspace import NoteRepository

logger = logging.getLogger(__name__)


async def list_notes(
    repo: NoteRepository = Depends(get_repository),
) -> list[NoteItem]:
    return await run_in_threadpool(repo.list_notes)


async def read_note(
    name: str,
    repo: NoteRepository = Depends(get_repository),
) -> PlainTextResponse:
    content = await run_in_threadpool(repo.read, name)
    return PlainTextResponse(content)


async def write_note(
    request: Request,
    note_name: str = Form(...),
    note: str = Form(""),
    repo: NoteRepository = Depends(get_repository),
) -> PlainTextResponse:
    """Create a note from the upload form. Fails if the name is taken."""
    await run_in_threadpool(repo.create, note_name, note)
    return PlainTextResponse("Created", status_code=201)


async def update_note(
    name: str,
    request: Request,
    repo: NoteRepository = Depends(get_repository),
) -> PlainTextResponse:
    """Replace the content of an existing note with the raw request body."""
    body = await request.body()
    try:
        content = body.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Rejected non UTF-8 body", extra={"note": name})
        raise HTTPException(status_code=400, detail="Request body must be UTF-8 text")
    await run_in_threadpool(repo.update, name, content)
    return PlainTextResponse("Note updated")


async def delete_note(
    name: str,
    request: Request,
    repo: NoteRepository = Depends(get_repository),
) -> PlainTextResponse:
    await run_in_threadpool(repo.delete, name)
    return PlainTextResponse("Note deleted")


def build_router(limiter: Limiter, write_limit: str) -> APIRouter:
    """Note routes with the mutating ones throttled by the app's own limiter."""
    throttle = limiter.limit(write_limit)
    router = APIRouter(tags=["notes"])
    router.add_api_route("/notes", list_notes, methods=["GET"], response_model=list[NoteItem])
    router.add_api_route("/notes/{name}", read_note, methods=["GET"], response_class=PlainTextResponse)
    router.add_api_route(
        "/write", throttle(write_note), methods=["POST"], status_code=201, response_class=PlainTextResponse
    )
    router.add_api_route(
        "/notes/{name}", throttle(update_note), methods=["PUT"], response_class=PlainTextResponse
    )
    router.add_api_route(
        "/notes/{name}", throttle(delete_note), methods=["DELETE"], response_class=PlainTextResponse
    )
    return router
