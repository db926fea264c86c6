"""
Feed assembler wrapping extracted entries with feed-level metadata.
"""

from datetime import datetime
from typing import Optional

from page2atom.core.builder import EntryBuilder
from page2atom.core.extractor import PatternExtractor, normalize_page_text
from page2atom.logger import get_logger
from page2atom.models import Entry, Feed, FeedSpec, Link

logger = get_logger(__name__)


class FeedAssembler:
    """Produces one candidate feed per feed definition."""

    def __init__(
        self,
        extractor: Optional[PatternExtractor] = None,
        builder: Optional[EntryBuilder] = None,
    ) -> None:
        """Initialize feed assembler.

        Args:
            extractor: Pattern extractor, a default one is created if omitted
            builder: Entry builder, a default one is created if omitted
        """
        self.extractor = extractor or PatternExtractor()
        self.builder = builder or EntryBuilder()

    def assemble(self, spec: FeedSpec, entries: list[Entry], now: datetime) -> Feed:
        """Wrap entries into a feed.

        Entries keep their order. An entry whose id was already seen is
        dropped, the first occurrence wins.

        Args:
            spec: Feed definition
            entries: Entries in extraction order
            now: Feed updated timestamp

        Returns:
            Candidate feed
        """
        seen: set[str] = set()
        unique: list[Entry] = []

        for entry in entries:
            if entry.id in seen:
                logger.debug(f"Skipping duplicate entry {entry.id} in '{spec.title}'")
                continue
            seen.add(entry.id)
            unique.append(entry)

        links = [Link(href=spec.url, rel="self")]
        if spec.url_home:
            links.append(Link(href=spec.url_home))

        return Feed(
            id=spec.feed_id,
            title=spec.title,
            subtitle=spec.description,
            author=spec.author,
            links=tuple(links),
            updated=now,
            entries=tuple(unique),
        )

    def assemble_from_page(self, spec: FeedSpec, page_text: str, now: datetime) -> Feed:
        """Build the candidate feed for a fetched page.

        Matches are drawn until ``spec.entry_max`` entries with distinct ids
        have been accepted; a repeated link does not use up a slot.

        Args:
            spec: Feed definition
            page_text: Page source, line breaks are normalized here
            now: Timestamp for the feed and its entries

        Returns:
            Candidate feed
        """
        logger.debug(f"Parsing feed for {spec.title}")

        seen: set[str] = set()
        entries: list[Entry] = []

        for match in self.extractor.iter_matches(normalize_page_text(page_text), spec):
            entry = self.builder.build(match, spec, now)
            if entry.id in seen:
                logger.debug(f"Skipping duplicate entry {entry.id} in '{spec.title}'")
                continue
            seen.add(entry.id)
            entries.append(entry)
            if len(entries) >= spec.entry_max:
                break

        logger.debug(f"Extracted {len(entries)} entries for '{spec.title}'")
        return self.assemble(spec, entries, now)


def create_assembler() -> FeedAssembler:
    """Create a FeedAssembler instance."""
    return FeedAssembler()
