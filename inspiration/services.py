from __future__ import annotations
from datetime import date, datetime
import logging
from typing import TYPE_CHECKING, Iterable, Optional

from sqlmodel import select

from .db import session_scope
from .errors import ValidationError
from .models import Note, Tag, TagBase
from .tags import analysis_tags

if TYPE_CHECKING:
    from .gateway import AIGateway

log = logging.getLogger("inspiration.notes")


def _clean_content(content: Optional[str]) -> str:
    if content is None or not content.strip():
        raise ValidationError("Note content must not be empty")
    return content


def list_notes() -> list[Note]:
    """All notes, newest first, with their tags attached."""
    with session_scope() as s:
        stmt = select(Note).order_by(Note.created_at.desc(), Note.id.desc())
        return list(s.exec(stmt))


def get_note(note_id: int) -> Optional[Note]:
    with session_scope() as s:
        return s.get(Note, note_id)


def create_note(
    content: str,
    tags: Iterable[TagBase] = (),
    created_at: Optional[datetime] = None,
    updated_at: Optional[datetime] = None,
) -> Note:
    """
    Insert a note and its tags (in the given order) in one transaction.
    Either both are stored or nothing is.

    Timestamps default to now; imports pass the stored ones through.
    """
    content = _clean_content(content)
    stamps = {}
    if created_at is not None:
        stamps["created_at"] = created_at
        stamps["updated_at"] = updated_at or created_at
    elif updated_at is not None:
        stamps["updated_at"] = updated_at
    with session_scope() as s:
        note = Note(content=content, **stamps)
        note.tags = [Tag(key=t.key, value=t.value) for t in tags]
        s.add(note)
        s.flush()  # assigns note and tag ids
        log.info("created note id=%s tags=%d", note.id, len(note.tags))
        return note


def update_note(note_id: int, content: str) -> Optional[Note]:
    """
    Overwrite content and bump updated_at.
    Unknown ids are ignored and return None.
    """
    content = _clean_content(content)
    with session_scope() as s:
        note = s.get(Note, note_id)
        if note is None:
            return None
        note.content = content
        note.touch()
        s.add(note)
        s.flush()
        return note


def delete_note(note_id: int) -> None:
    """Remove a note and its tags. Deleting a missing id is not an error."""
    with session_scope() as s:
        note = s.get(Note, note_id)
        if note is None:
            return
        s.delete(note)
        log.info("deleted note id=%s", note_id)


def clear_all() -> int:
    """Remove every note and tag. Returns the number of notes removed."""
    with session_scope() as s:
        notes = list(s.exec(select(Note)))
        for note in notes:
            s.delete(note)
        count = len(notes)
    log.warning("cleared all notes (%d removed)", count)
    return count


def capture_note(content: str, gateway: AIGateway, today: Optional[date] = None) -> Note:
    """Classify a note with the AI gateway and store it with the derived tags."""
    content = _clean_content(content)
    analysis = gateway.analyze_note(content)
    return create_note(content, analysis_tags(analysis, today or date.today()))
