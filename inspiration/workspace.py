"""
Document workspace: one text buffer that AI actions rewrite.

Only one AI call may run against a workspace at a time. A second request made
while one is outstanding fails with ``WorkspaceBusyError`` instead of waiting,
so two completions can never overwrite each other.
"""
from __future__ import annotations
from contextlib import contextmanager
import logging
import threading
from typing import Iterable, Optional

from pydantic import ValidationError as PydanticValidationError

from .errors import ParseError, ValidationError, WorkspaceBusyError
from .formatter import format_text
from .gateway import AIGateway, parse_json
from .models import Note
from .schemas import MindMapNode

log = logging.getLogger("inspiration.workspace")

BUFFER_ACTIONS = ("translate", "proofread", "format")
NOTE_SEPARATOR = "\n\n---\n\n"


class DocumentWorkspace:
    def __init__(self, gateway: AIGateway, content: str = "", context: str = ""):
        self.gateway = gateway
        self.content = content
        self.context = context
        self.mind_map: Optional[MindMapNode] = None
        self._in_flight = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._in_flight.locked()

    @contextmanager
    def _single_flight(self):
        if not self._in_flight.acquire(blocking=False):
            raise WorkspaceBusyError()
        try:
            yield
        finally:
            self._in_flight.release()

    def _require_content(self) -> None:
        if not self.content.strip():
            raise ValidationError("The document is empty")

    # ---------- buffer ----------
    def set_content(self, content: str) -> None:
        self.content = content

    def collect(self, notes: Iterable[Note]) -> None:
        """Load notes into the buffer; they also become the chat context."""
        contents = [n.content for n in notes]
        self.content = NOTE_SEPARATOR.join(contents)
        self.context = "\n".join(contents)

    def apply_local_format(self) -> str:
        self.content = format_text(self.content)
        return self.content

    # ---------- AI ----------
    def apply_ai_action(self, action: str) -> str:
        if action not in BUFFER_ACTIONS:
            raise ValidationError(f"Unknown document action: {action!r}")
        self._require_content()
        with self._single_flight():
            result = self.gateway.process_document(self.content, action)
            self.content = result
        return result

    def chat(self, message: str) -> str:
        if not message or not message.strip():
            raise ValidationError("Chat message must not be empty")
        with self._single_flight():
            result = self.gateway.chat_with_context(self.content, self.context, message)
            self.content = result
        return result

    def request_mind_map(self) -> MindMapNode:
        self._require_content()
        with self._single_flight():
            self.mind_map = None
            raw = self.gateway.process_document(self.content, "mindmap")
            try:
                self.mind_map = MindMapNode.model_validate(parse_json(raw))
            except PydanticValidationError as e:
                log.warning("mind map has the wrong shape: %s", e)
                raise ParseError("Mind map JSON must be a {name, children} tree") from e
            return self.mind_map
