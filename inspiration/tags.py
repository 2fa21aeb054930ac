"""
Tag index: counts and AND-filtering over a snapshot of notes.

Nothing here touches the database; call it again after every read.
"""
from __future__ import annotations
from datetime import date
from typing import Iterable, NamedTuple, Sequence, TypeVar

from .models import TagBase
from .schemas import AIAnalysis

N = TypeVar("N")


class TagCount(NamedTuple):
    value: str
    count: int


def tag_counts(notes: Iterable) -> list[TagCount]:
    """
    Count how many notes carry each tag value, most common first.
    Equal counts keep the order in which values were first seen.
    """
    counts: dict[str, int] = {}
    for note in notes:
        for value in dict.fromkeys(t.value for t in note.tags):
            counts[value] = counts.get(value, 0) + 1
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [TagCount(v, c) for v, c in ranked]


def filter_notes(notes: Sequence[N], selected: Iterable[str]) -> list[N]:
    """Notes carrying every selected tag value. No selection keeps them all."""
    wanted = set(selected)
    if not wanted:
        return list(notes)
    return [n for n in notes if wanted <= {t.value for t in n.tags}]


def analysis_tags(analysis: AIAnalysis, today: date) -> list[TagBase]:
    tags = [
        TagBase(key="date", value=today.isoformat()),
        TagBase(key="topic", value=analysis.topic),
        TagBase(key="category", value=analysis.category),
    ]
    tags.extend(TagBase(key="people", value=p) for p in analysis.people)
    return tags
