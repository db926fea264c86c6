"""
Entry builder turning raw pattern matches into feed entries.
"""

from datetime import datetime
from urllib.parse import urlsplit

from page2atom.core.extractor import RawEntryMatch
from page2atom.logger import get_logger
from page2atom.models import Entry, FeedSpec

logger = get_logger(__name__)


def resolve_link(source_url: str, fragment: str) -> str:
    """Resolve a captured link against the page it was found on.

    Rules are checked in order:

    - ``#anchor`` is appended to the full source URL
    - ``/path`` is appended to the scheme and host of the source URL; a
      port in the source URL is kept, credentials are not
    - an empty fragment resolves to the source URL itself
    - anything else is used unchanged

    Args:
        source_url: URL of the page the link was extracted from
        fragment: Captured link text

    Returns:
        Absolute link
    """
    if not fragment:
        return source_url

    if fragment.startswith("#"):
        return source_url + fragment

    if fragment.startswith("/"):
        parts = urlsplit(source_url)
        host = parts.netloc.rpartition("@")[2]
        return f"{parts.scheme}://{host}{fragment}"

    return fragment


class EntryBuilder:
    """Maps raw captures to entry id, title and summary."""

    def build(self, match: RawEntryMatch, spec: FeedSpec, updated: datetime) -> Entry:
        """Build an entry from one raw match.

        Args:
            match: Raw entry match
            spec: Feed definition supplying group indices and the source URL
            updated: Entry timestamp

        Returns:
            Entry whose id is the resolved absolute link
        """
        title = match.group(spec.title_group)
        link = resolve_link(spec.url, match.group(spec.url_group))

        # Summary HTML is stored as captured, an empty capture included
        summary = match.group(spec.content_group) if spec.content_group is not None else None

        logger.trace(f"  title = {title}")
        logger.trace(f"  link = {link}")

        return Entry(id=link, title=title, summary=summary, updated=updated)

    def build_all(
        self,
        matches: list[RawEntryMatch],
        spec: FeedSpec,
        updated: datetime,
    ) -> list[Entry]:
        """Build entries for all matches, keeping match order."""
        return [self.build(match, spec, updated) for match in matches]


def create_builder() -> EntryBuilder:
    """Create an EntryBuilder instance."""
    return EntryBuilder()
