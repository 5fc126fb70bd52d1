"""FastAPI application for the spreadsheet editor"""

import asyncio
import os
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from assistant.suggestions import QUICK_FORMULAS, filter_command_suggestions
from auth import AuthSession, JWTError, JWTManager, User
from core.exceptions import AddressParseError
from core.interfaces import TextGenerator
from editor import SpreadsheetEditor
from grid.evaluator import extract_references
from llm.client import LLMClient
from ui.notifications import BufferedNotifier
from utils.addressing import parse_address
from utils.logging import get_logger

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)  # Missing credentials are reported as 401 below
jwt_manager = JWTManager.from_settings()

app = FastAPI(
    title="Gridmind API",
    description="AI-assisted spreadsheet editor API",
    version="1.0.0"
)

cors_origins_str = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000")
cors_origins = [origin.strip() for origin in cors_origins_str.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One editor per signed-in user, kept for the lifetime of the process
sessions: Dict[str, SpreadsheetEditor] = {}
_llm: Optional[TextGenerator] = None


# Pydantic models for request validation
class CellValueRequest(BaseModel):
    value: str


class SelectRequest(BaseModel):
    row: int = Field(ge=0)
    col: int = Field(ge=0)


class KeyRequest(BaseModel):
    key: str
    ctrl: bool = False
    meta: bool = False


class BufferRequest(BaseModel):
    text: str


class FormulaQueryRequest(BaseModel):
    query: str


class ChatRequest(BaseModel):
    message: str


class SuggestionRequest(BaseModel):
    suggestion: str


# Dependencies
async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> User:
    """Resolve the bearer token to a user"""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        return jwt_manager.verify_token(credentials.credentials)
    except JWTError as e:
        raise HTTPException(status_code=401, detail=str(e))


def get_llm() -> TextGenerator:
    """Shared language-model client"""
    global _llm
    if _llm is None:
        _llm = LLMClient()
    return _llm


def get_editor(
    user: User = Depends(get_current_user),
    llm: TextGenerator = Depends(get_llm)
) -> SpreadsheetEditor:
    """The calling user's editor, created and seeded on first use"""
    editor = sessions.get(user.id)
    if editor is None:
        auth = AuthSession()
        editor = SpreadsheetEditor(llm=llm, notifier=BufferedNotifier(), auth=auth)
        auth.sign_in(user)
        sessions[user.id] = editor
        logger.info("Created editor session", user_id=user.id)
    return editor


def log_chat_failure(task: asyncio.Task) -> None:
    """Retrieve and log the outcome of a chat task nobody awaits anymore"""
    if task.cancelled():
        logger.info("Chat task cancelled")
        return
    error = task.exception()
    if error is not None:
        logger.error("Chat task failed", error=repr(error))


def _sheet_payload(editor: SpreadsheetEditor) -> dict:
    controller = editor.controller
    cells = {}
    for cell_id, cell in editor.cells.items():
        entry = cell.model_dump(mode="json", exclude_none=True)
        entry["display"] = editor.display_value(cell_id)
        if cell.formula:
            entry["references"] = extract_references(cell.formula)
        cells[cell_id] = entry

    return {
        "cells": cells,
        "selection": controller.selection.model_dump() if controller.selection else None,
        "selected_address": controller.selected_address,
        "mode": controller.mode.value,
        "buffer": controller.buffer,
        "size": {"rows": controller.rows, "cols": controller.cols},
        "notifications": [
            {
                "title": n.title,
                "description": n.description,
                "duration_ms": n.duration_ms
            }
            for n in editor.notifier.drain()
        ],
    }


# Endpoints
@app.get("/api/health")
async def health():
    return {"status": "ok"}


@app.get("/api/sheet")
async def get_sheet(editor: SpreadsheetEditor = Depends(get_editor)):
    """Cells with display values plus the interaction state"""
    return _sheet_payload(editor)


@app.put("/api/cells/{address}")
async def put_cell(
    address: str,
    request: CellValueRequest,
    editor: SpreadsheetEditor = Depends(get_editor)
):
    """Commit a raw value or formula to one cell"""
    try:
        position = parse_address(address.upper())
    except AddressParseError as e:
        raise HTTPException(status_code=400, detail=str(e))
    editor.set_cell_value(position.row, position.col, request.value)
    return _sheet_payload(editor)


@app.post("/api/grid/select")
async def select_cell(request: SelectRequest, editor: SpreadsheetEditor = Depends(get_editor)):
    editor.controller.select(request.row, request.col)
    return _sheet_payload(editor)


@app.post("/api/grid/keys")
async def key_down(request: KeyRequest, editor: SpreadsheetEditor = Depends(get_editor)):
    editor.controller.key_down(request.key, ctrl=request.ctrl, meta=request.meta)
    return _sheet_payload(editor)


@app.put("/api/grid/buffer")
async def set_buffer(request: BufferRequest, editor: SpreadsheetEditor = Depends(get_editor)):
    if not editor.controller.is_editing:
        editor.controller.start_edit()
    editor.controller.set_buffer(request.text)
    return _sheet_payload(editor)


@app.post("/api/grid/confirm")
async def confirm_edit(editor: SpreadsheetEditor = Depends(get_editor)):
    editor.controller.confirm()
    return _sheet_payload(editor)


@app.post("/api/grid/cancel")
async def cancel_edit(editor: SpreadsheetEditor = Depends(get_editor)):
    editor.controller.cancel()
    return _sheet_payload(editor)


@app.post("/api/ai/formula")
async def generate_formula(request: FormulaQueryRequest, editor: SpreadsheetEditor = Depends(get_editor)):
    """Generate a formula and apply it to the selected cell"""
    if not request.query.strip():
        raise HTTPException(status_code=400, detail="Query must not be empty")
    if editor.formula_bridge.is_busy:
        raise HTTPException(status_code=409, detail="A formula request is already in progress")

    result = await editor.generate_formula(request.query)
    return {
        "result": result.model_dump() if result else None,
        "sheet": _sheet_payload(editor)
    }


@app.post("/api/ai/insights")
async def refresh_insights(editor: SpreadsheetEditor = Depends(get_editor)):
    analysis = await editor.refresh_insights()
    return {"analysis": analysis.model_dump(by_alias=True) if analysis else None}


@app.post("/api/ai/chat")
async def chat(request: ChatRequest, editor: SpreadsheetEditor = Depends(get_editor)):
    """Stream the assistant reply as plain text"""
    if not request.message.strip():
        raise HTTPException(status_code=400, detail="Message must not be empty")
    if editor.chat_assistant.is_busy:
        raise HTTPException(status_code=409, detail="A reply is already streaming")

    queue: asyncio.Queue = asyncio.Queue()
    cancel = asyncio.Event()
    delivered: List[str] = []

    def on_chunk(chunk: str) -> None:
        delivered.append(chunk)
        queue.put_nowait(chunk)

    async def run_chat():
        try:
            return await editor.chat(request.message, cancel=cancel, on_chunk=on_chunk)
        finally:
            queue.put_nowait(None)

    task = asyncio.create_task(run_chat())
    task.add_done_callback(log_chat_failure)

    async def body():
        try:
            while True:
                chunk = await queue.get()
                if chunk is None:
                    break
                yield chunk
            message = await task
            if message is not None and not delivered:
                # Failed before any text arrived; send the apology instead
                yield message.content
        finally:
            if not task.done():
                cancel.set()
                logger.info("Chat stream closed by client")

    return StreamingResponse(body(), media_type="text/plain; charset=utf-8")


@app.get("/api/ai/chat/messages")
async def chat_messages(editor: SpreadsheetEditor = Depends(get_editor)):
    return [m.model_dump(mode="json") for m in editor.chat_assistant.messages]


@app.post("/api/ai/chat/apply")
async def apply_chat_formula(request: SuggestionRequest, editor: SpreadsheetEditor = Depends(get_editor)):
    """Apply a formula proposed in chat to the selected cell"""
    if not request.suggestion.startswith("="):
        raise HTTPException(status_code=400, detail="Not a formula")
    editor.apply_chat_formula(request.suggestion)
    return _sheet_payload(editor)


@app.post("/api/ai/suggestions/apply")
async def apply_suggestion(request: SuggestionRequest, editor: SpreadsheetEditor = Depends(get_editor)):
    editor.apply_suggestion(request.suggestion)
    return _sheet_payload(editor)


@app.get("/api/ai/quick-formulas")
async def quick_formulas(user: User = Depends(get_current_user)):
    return [{"label": q.label, "formula": q.formula} for q in QUICK_FORMULAS]


@app.get("/api/ai/command-suggestions")
async def command_suggestions(q: str = Query(""), user: User = Depends(get_current_user)):
    return filter_command_suggestions(q)
