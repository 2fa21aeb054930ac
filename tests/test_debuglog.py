import pytest
from pydantic import ValidationError as PydanticValidationError

from inspiration.debuglog import DebugLog


def test_add_notifies_with_full_snapshot():
    dl = DebugLog()
    seen = []
    dl.subscribe(lambda entries: seen.append([e.content for e in entries]))

    dl.add("request", "m", "prompt")
    dl.add("response", "m", "answer", {"prompt_length": 6, "response_length": 6})

    assert seen == [["prompt"], ["prompt", "answer"]]
    last = dl.entries()[-1]
    assert last.type == "response"
    assert last.model == "m"
    assert last.metadata == {"prompt_length": 6, "response_length": 6}
    assert len({e.id for e in dl.entries()}) == 2


def test_unsubscribe_and_clear():
    dl = DebugLog()
    seen = []
    unsubscribe = dl.subscribe(lambda entries: seen.append(len(entries)))
    dl.add("request", "m", "a")
    dl.clear()
    assert seen == [1, 0]
    assert dl.entries() == []

    unsubscribe()
    unsubscribe()  # harmless twice
    dl.add("request", "m", "b")
    assert seen == [1, 0]


def test_failing_subscriber_does_not_break_others(caplog):
    dl = DebugLog()
    seen = []

    def broken(entries):
        raise RuntimeError("subscriber bug")

    dl.subscribe(broken)
    dl.subscribe(lambda entries: seen.append(len(entries)))

    dl.add("error", "m", "boom")
    assert seen == [1]
    assert len(dl.entries()) == 1
    assert "subscriber" in caplog.text


def test_limit_evicts_oldest():
    dl = DebugLog(limit=3)
    for i in range(5):
        dl.add("request", "m", str(i))
    assert [e.content for e in dl.entries()] == ["2", "3", "4"]


def test_entries_are_snapshots_and_immutable():
    dl = DebugLog()
    entry = dl.add("request", "m", "x")
    snapshot = dl.entries()
    snapshot.clear()
    assert len(dl.entries()) == 1
    with pytest.raises(PydanticValidationError):
        entry.content = "changed"


def test_close_drops_subscribers():
    dl = DebugLog()
    seen = []
    dl.subscribe(lambda entries: seen.append(1))
    dl.close()
    dl.add("request", "m", "x")
    assert seen == []
