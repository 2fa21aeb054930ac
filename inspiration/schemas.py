from __future__ import annotations
from datetime import datetime, UTC
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# ---------- AI contracts ----------
CATEGORIES = ("IT技术", "管理", "财务", "私人事务", "其它")
Category = Literal["IT技术", "管理", "财务", "私人事务", "其它"]

DocumentAction = Literal["translate", "proofread", "format", "mindmap"]
DOCUMENT_ACTIONS = ("translate", "proofread", "format", "mindmap")


class AIAnalysis(BaseModel):
    model_config = ConfigDict(extra="ignore")

    topic: str
    people: list[str]
    category: Category
    summary: str


class MindMapNode(BaseModel):
    name: str
    children: Optional[list[MindMapNode]] = None


# ---------- API ----------
class TagIn(BaseModel):
    key: str
    value: str


class NoteCreate(BaseModel):
    content: str
    tags: list[TagIn] = Field(default_factory=list)


class NoteCapture(BaseModel):
    content: str


class NoteEdit(BaseModel):
    content: str


class TagOut(BaseModel):
    key: str
    value: str


class NoteOut(BaseModel):
    id: int
    content: str
    created_at: datetime
    updated_at: datetime
    tags: list[TagOut]


class TagCountOut(BaseModel):
    value: str
    count: int


class Success(BaseModel):
    success: bool = True
    deleted: Optional[int] = None


class WorkspaceIn(BaseModel):
    content: str


class CollectIn(BaseModel):
    tags: list[str] = Field(default_factory=list)


class ChatIn(BaseModel):
    message: str


class WorkspaceOut(BaseModel):
    content: str
    context: str
    busy: bool
    mind_map: Optional[MindMapNode] = None


class LogEntryOut(BaseModel):
    id: str
    timestamp: str
    type: str
    model: str
    content: str
    metadata: Optional[dict[str, Any]] = None


def as_utc(value: datetime) -> datetime:
    # SQLite hands datetimes back without tzinfo; they were written as UTC
    return value if value.tzinfo else value.replace(tzinfo=UTC)
