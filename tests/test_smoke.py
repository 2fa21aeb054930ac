from sqlmodel import select

from inspiration.db import init_db, get_session, reset_engine
from inspiration.models import Note, Tag


def test_create_note_with_tag_rows(tmp_path, monkeypatch):
    monkeypatch.setenv("INSPIRATION_DB_PATH", str(tmp_path / "smoke.sqlite"))
    reset_engine()
    init_db()

    s = get_session()
    note = Note(content="hello")
    note.tags = [Tag(key="topic", value="greeting")]
    s.add(note)
    s.commit()
    assert note.id is not None
    assert note.tags[0].note_id == note.id
    s.close()


def test_sqlite_cascade_removes_tags(tmp_path, monkeypatch):
    monkeypatch.setenv("INSPIRATION_DB_PATH", str(tmp_path / "cascade.sqlite"))
    reset_engine()
    init_db()

    s = get_session()
    note = Note(content="bye")
    note.tags = [Tag(key="topic", value="a"), Tag(key="people", value="b")]
    s.add(note)
    s.commit()

    # plain SQL, bypassing the ORM cascade: the foreign key does the work
    s.connection().exec_driver_sql("DELETE FROM notes WHERE id = ?", (note.id,))
    s.commit()
    s.expunge_all()
    assert list(s.exec(select(Tag))) == []
    s.close()
