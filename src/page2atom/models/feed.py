"""
Atom feed data models.

Feeds and entries are immutable values: merging builds new instances instead
of editing the feed read from disk.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Link(BaseModel):
    """Atom link element."""

    model_config = ConfigDict(frozen=True)

    href: str
    rel: Optional[str] = None


class Entry(BaseModel):
    """A single feed entry.

    The id is the absolute URL of the entry and doubles as its link. Entries
    are matched during merges by id string equality only.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    summary: Optional[str] = Field(None, description="HTML summary, stored verbatim")
    updated: datetime

    @property
    def link(self) -> str:
        return self.id

    def __repr__(self) -> str:
        return f"<Entry(id='{self.id}', title='{self.title}')>"


class Feed(BaseModel):
    """An Atom feed, entries ordered newest first."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    subtitle: str = ""
    author: str = ""
    links: tuple[Link, ...] = ()
    updated: datetime
    entries: tuple[Entry, ...] = ()

    @property
    def first_entry(self) -> Optional[Entry]:
        """Most recent entry, if any."""
        return self.entries[0] if self.entries else None

    @property
    def entry_ids(self) -> list[str]:
        return [entry.id for entry in self.entries]

    def __repr__(self) -> str:
        return f"<Feed(id='{self.id}', entries={len(self.entries)})>"
