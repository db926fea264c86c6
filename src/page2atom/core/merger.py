"""
Merge engine reconciling a candidate feed with the persisted feed.

The persisted feed's first entry is the boundary: candidate entries are new
until the boundary id shows up, everything from there on is already on disk.
Only the boundary is compared, so entries that are reordered or removed
upstream between runs can be inserted a second time.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from page2atom.exceptions import ParseError
from page2atom.logger import get_logger
from page2atom.models import Entry, Feed

logger = get_logger(__name__)


class MergeAction(str, Enum):
    """Outcome of a merge."""

    CREATE = "create"
    UNCHANGED = "unchanged"
    APPEND = "append"
    EMPTY = "empty"


@dataclass(frozen=True)
class MergeResult:
    """Result of merging a candidate feed into a persisted feed."""

    action: MergeAction
    feed: Optional[Feed] = None
    new_entries: int = 0

    def __post_init__(self):
        """Validate merge result."""
        if self.should_write and self.feed is None:
            raise ValueError(f"Merge action {self.action.value} requires a feed to write")

    @property
    def should_write(self) -> bool:
        return self.action in (MergeAction.CREATE, MergeAction.APPEND)


class MergeEngine:
    """Append-only, idempotent synchronization of candidate and persisted feeds."""

    def new_entries(self, candidate: Feed, boundary_id: str) -> list[Entry]:
        """Get candidate entries that precede the boundary entry.

        Args:
            candidate: Freshly extracted feed
            boundary_id: Id of the persisted feed's first entry

        Returns:
            New entries in candidate order; all candidate entries when the
            boundary id does not occur in the candidate
        """
        fresh: list[Entry] = []
        for entry in candidate.entries:
            if entry.id == boundary_id:
                break
            fresh.append(entry)
        return fresh

    def merge(
        self,
        candidate: Feed,
        persisted: Optional[Feed],
        now: datetime,
        source: Optional[str] = None,
    ) -> MergeResult:
        """Merge a candidate feed into the persisted feed.

        Neither feed is modified, a combined feed is built instead.

        Args:
            candidate: Freshly extracted feed
            persisted: Feed read from storage, None if there is none yet
            now: Merge time, used as the combined feed's updated timestamp
            source: Location of the persisted feed, used in error messages

        Returns:
            MergeResult describing what to write

        Raises:
            ParseError: If the persisted feed has no entries
        """
        if persisted is not None and persisted.first_entry is None:
            raise ParseError(source or persisted.id, "persisted feed has no entries", feed=candidate.title)

        if candidate.first_entry is None:
            logger.warning(f"No entries extracted for '{candidate.title}', keeping persisted feed")
            return MergeResult(action=MergeAction.EMPTY)

        if persisted is None:
            return MergeResult(
                action=MergeAction.CREATE,
                feed=candidate,
                new_entries=len(candidate.entries),
            )

        boundary_id = persisted.first_entry.id
        if candidate.first_entry.id == boundary_id:
            logger.debug(f"Feed '{candidate.title}' is up to date")
            return MergeResult(action=MergeAction.UNCHANGED)

        fresh = self.new_entries(candidate, boundary_id)
        merged = persisted.model_copy(
            update={
                "entries": tuple(fresh) + persisted.entries,
                "updated": now,
            }
        )

        return MergeResult(action=MergeAction.APPEND, feed=merged, new_entries=len(fresh))


def create_merge_engine() -> MergeEngine:
    """Create a MergeEngine instance."""
    return MergeEngine()
