from datetime import date
import json

import pytest
from sqlmodel import select

from inspiration.db import get_session
from inspiration.errors import ParseError, UpstreamError, ValidationError
from inspiration.models import Tag, TagBase
from inspiration.services import (
    capture_note, clear_all, create_note, delete_note, get_note, list_notes,
)


def _tag_rows(note_id=None):
    with get_session() as s:
        stmt = select(Tag)
        if note_id is not None:
            stmt = stmt.where(Tag.note_id == note_id)
        return list(s.exec(stmt))


def test_delete_cascades_tags_and_is_idempotent(db):
    a = create_note("A", tags=[TagBase(key="topic", value="x"), TagBase(key="people", value="Li")])
    b = create_note("B", tags=[TagBase(key="topic", value="y")])

    delete_note(a.id)
    assert get_note(a.id) is None
    assert [n.id for n in list_notes()] == [b.id]
    assert _tag_rows(a.id) == []
    assert [t.value for t in _tag_rows()] == ["y"]

    # second delete and unknown ids are fine
    delete_note(a.id)
    delete_note(9999)


def test_clear_all_removes_everything(db):
    create_note("one", tags=[TagBase(key="topic", value="a")])
    create_note("two", tags=[TagBase(key="topic", value="b")])

    assert clear_all() == 2
    assert list_notes() == []
    assert _tag_rows() == []
    assert clear_all() == 0


ANALYSIS = {"topic": "会议", "people": ["张三", "李四"], "category": "管理", "summary": "周会"}


def test_capture_note_stores_ai_tags(db, make_gateway):
    gw = make_gateway(json.dumps(ANALYSIS, ensure_ascii=False))
    note = capture_note("和张三李四开周会", gw, today=date(2024, 1, 1))

    assert [(t.key, t.value) for t in note.tags] == [
        ("date", "2024-01-01"),
        ("topic", "会议"),
        ("category", "管理"),
        ("people", "张三"),
        ("people", "李四"),
    ]
    assert gw.calls[0][0] == "analysis"
    assert "和张三李四开周会" in gw.calls[0][1]


@pytest.mark.parametrize("reply", [
    "not json at all",
    json.dumps({"topic": "T"}),
    UpstreamError("boom", status=500),
])
def test_capture_note_stores_nothing_when_ai_fails(db, make_gateway, reply):
    gw = make_gateway(reply)
    with pytest.raises((ParseError, UpstreamError)):
        capture_note("something", gw)
    assert list_notes() == []


def test_capture_note_validates_before_calling_ai(db, make_gateway):
    gw = make_gateway()
    with pytest.raises(ValidationError):
        capture_note("  ", gw)
    assert gw.calls == []
