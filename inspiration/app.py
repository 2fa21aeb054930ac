# inspiration/app.py
from __future__ import annotations
from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from .config import Settings, load_settings
from .db import init_db
from .debuglog import DebugLog
from .errors import InspirationError
from .gateway import AIGateway, build_gateway
from .logs import setup_logging
from .models import Note, TagBase
from .schemas import (
    ChatIn,
    CollectIn,
    LogEntryOut,
    MindMapNode,
    NoteCapture,
    NoteCreate,
    NoteEdit,
    NoteOut,
    Success,
    TagCountOut,
    TagOut,
    WorkspaceIn,
    WorkspaceOut,
    as_utc,
)
from .services import (
    capture_note,
    clear_all,
    create_note,
    delete_note,
    get_note,
    list_notes,
    update_note,
)
from .tags import filter_notes, tag_counts
from .workspace import DocumentWorkspace

log = logging.getLogger("inspiration.api")


def _to_out(n: Note) -> NoteOut:
    return NoteOut(
        id=n.id, content=n.content,
        created_at=as_utc(n.created_at), updated_at=as_utc(n.updated_at),
        tags=[TagOut(key=t.key, value=t.value) for t in n.tags],
    )


def _workspace_out(ws: DocumentWorkspace) -> WorkspaceOut:
    return WorkspaceOut(content=ws.content, context=ws.context, busy=ws.busy, mind_map=ws.mind_map)


# ---------- Dependencies ----------
def get_gateway(request: Request) -> AIGateway:
    return request.app.state.gateway


def get_debug_log(request: Request) -> DebugLog:
    return request.app.state.debug_log


def get_workspace(request: Request) -> DocumentWorkspace:
    return request.app.state.workspace


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InspirationError)
    async def _inspiration_error(request: Request, exc: InspirationError):
        if exc.status_code >= 500:
            log.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


def create_app(
    settings: Optional[Settings] = None,
    gateway: Optional[AIGateway] = None,
) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings.log_level)
    init_db()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.debug_log.close()

    app = FastAPI(title="Inspiration Notes API", lifespan=lifespan)
    app.state.settings = settings
    app.state.debug_log = DebugLog(limit=settings.debug_log_limit)
    app.state.gateway = gateway or build_gateway(settings, app.state.debug_log)
    app.state.workspace = DocumentWorkspace(app.state.gateway)
    register_exception_handlers(app)

    # ---------- Notes ----------
    @app.get("/api/notes", response_model=list[NoteOut])
    def api_list_notes(tag: Optional[list[str]] = Query(None)):
        notes = filter_notes(list_notes(), tag or [])
        return [_to_out(n) for n in notes]

    @app.post("/api/notes", response_model=NoteOut, status_code=201)
    def api_create_note(payload: NoteCreate):
        n = create_note(payload.content, [TagBase(key=t.key, value=t.value) for t in payload.tags])
        return _to_out(n)

    @app.post("/api/notes/capture", response_model=NoteOut, status_code=201)
    def api_capture_note(payload: NoteCapture, gateway: AIGateway = Depends(get_gateway)):
        n = capture_note(payload.content, gateway)
        return _to_out(n)

    @app.delete("/api/notes", response_model=Success)
    def api_clear_notes():
        return Success(deleted=clear_all())

    @app.get("/api/notes/{note_id}", response_model=NoteOut)
    def api_get_note(note_id: int):
        n = get_note(note_id)
        if not n:
            raise HTTPException(status_code=404, detail="Not found")
        return _to_out(n)

    @app.put("/api/notes/{note_id}", response_model=Success, response_model_exclude_none=True)
    def api_update_note(note_id: int, payload: NoteEdit):
        update_note(note_id, payload.content)
        return Success()

    @app.delete("/api/notes/{note_id}", response_model=Success, response_model_exclude_none=True)
    def api_delete_note(note_id: int):
        delete_note(note_id)
        return Success()

    @app.get("/api/tags", response_model=list[TagCountOut])
    def api_tags():
        return [TagCountOut(value=v, count=c) for v, c in tag_counts(list_notes())]

    # ---------- Workspace ----------
    @app.get("/api/workspace", response_model=WorkspaceOut)
    def api_workspace(ws: DocumentWorkspace = Depends(get_workspace)):
        return _workspace_out(ws)

    @app.put("/api/workspace", response_model=WorkspaceOut)
    def api_set_workspace(payload: WorkspaceIn, ws: DocumentWorkspace = Depends(get_workspace)):
        ws.set_content(payload.content)
        return _workspace_out(ws)

    @app.post("/api/workspace/collect", response_model=WorkspaceOut)
    def api_collect(payload: CollectIn, ws: DocumentWorkspace = Depends(get_workspace)):
        ws.collect(filter_notes(list_notes(), payload.tags))
        return _workspace_out(ws)

    @app.post("/api/workspace/actions/{action}", response_model=WorkspaceOut)
    def api_ai_action(action: str, ws: DocumentWorkspace = Depends(get_workspace)):
        ws.apply_ai_action(action)
        return _workspace_out(ws)

    @app.post("/api/workspace/format", response_model=WorkspaceOut)
    def api_local_format(ws: DocumentWorkspace = Depends(get_workspace)):
        ws.apply_local_format()
        return _workspace_out(ws)

    @app.post("/api/workspace/chat", response_model=WorkspaceOut)
    def api_chat(payload: ChatIn, ws: DocumentWorkspace = Depends(get_workspace)):
        ws.chat(payload.message)
        return _workspace_out(ws)

    @app.post("/api/workspace/mindmap", response_model=MindMapNode, response_model_exclude_none=True)
    def api_mind_map(ws: DocumentWorkspace = Depends(get_workspace)):
        return ws.request_mind_map()

    # ---------- Debug ----------
    @app.get("/api/debug/logs", response_model=list[LogEntryOut])
    def api_debug_logs(debug_log: DebugLog = Depends(get_debug_log)):
        return [LogEntryOut(**e.model_dump()) for e in debug_log.entries()]

    @app.delete("/api/debug/logs", response_model=Success, response_model_exclude_none=True)
    def api_clear_debug_logs(debug_log: DebugLog = Depends(get_debug_log)):
        debug_log.clear()
        return Success()

    return app
