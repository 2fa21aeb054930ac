from datetime import datetime, UTC
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel


def _now() -> datetime:
    return datetime.now(UTC)


class TagBase(SQLModel):
    key: str
    value: str


class Tag(TagBase, table=True):
    __tablename__ = "tags"

    id: Optional[int] = Field(default=None, primary_key=True)
    note_id: Optional[int] = Field(
        default=None, foreign_key="notes.id", ondelete="CASCADE", index=True
    )

    note: Optional["Note"] = Relationship(back_populates="tags")


class Note(SQLModel, table=True):
    __tablename__ = "notes"

    id: Optional[int] = Field(default=None, primary_key=True)
    content: str
    created_at: datetime = Field(default_factory=_now, index=True)
    updated_at: datetime = Field(default_factory=_now)

    # insertion order; loaded together with the note so detached copies keep them
    tags: List[Tag] = Relationship(
        back_populates="note",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "Tag.id",
            "lazy": "selectin",
        },
    )

    def touch(self) -> None:
        self.updated_at = _now()
