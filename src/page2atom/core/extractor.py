"""
Pattern extractor for pulling raw entry fields out of web page text.

A page is first narrowed with the optional page pattern, then the entry
pattern is matched repeatedly over what remains.
"""

import re
from typing import Iterator, Optional

from page2atom.logger import get_logger
from page2atom.models import FeedSpec

logger = get_logger(__name__)

_LINE_BREAKS = re.compile(r"\r\n|\r|\n")

# Characters outside the XML 1.0 Char production
_XML_ILLEGAL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def normalize_page_text(text: str) -> str:
    """Collapse every line break sequence into a single space.

    Patterns are written against single-line text, so this runs before any
    matching. Control characters that XML cannot carry are removed, so every
    captured title, link and summary can be written to an Atom file and read
    back unchanged.

    Args:
        text: Raw page source

    Returns:
        Page source on a single line
    """
    return _XML_ILLEGAL.sub("", _LINE_BREAKS.sub(" ", text))


class RawEntryMatch:
    """Captured groups of one entry pattern match."""

    def __init__(self, match: re.Match) -> None:
        self._match = match

    def group(self, index: Optional[int]) -> str:
        """Get a captured group, trimmed.

        Args:
            index: Group index, None for a group that is not configured

        Returns:
            Trimmed group text, empty when the group is not configured or did
            not take part in the match
        """
        if index is None:
            return ""
        value = self._match.group(index)
        return value.strip() if value else ""

    @property
    def span(self) -> tuple[int, int]:
        return self._match.span()

    def __repr__(self) -> str:
        return f"<RawEntryMatch(span={self.span})>"


class PatternExtractor:
    """Applies the page and entry patterns of a FeedSpec to page text."""

    def scope(self, text: str, spec: FeedSpec) -> str:
        """Narrow page text to the first match of the page pattern.

        Args:
            text: Normalized page text
            spec: Feed definition

        Returns:
            Group 1 of the page pattern match, or the whole text when there is
            no page pattern or it does not match
        """
        if spec.page_pattern is None:
            return text

        match = spec.page_pattern.search(text)
        if match is None or match.group(1) is None:
            logger.debug(f"Page pattern did not match for '{spec.title}', scanning whole page")
            return text

        logger.debug(f"Matched page pattern {spec.page_pattern.pattern!r} for '{spec.title}'")
        return match.group(1).strip()

    def iter_matches(self, text: str, spec: FeedSpec) -> Iterator[RawEntryMatch]:
        """Lazily yield entry matches over the scoped page text.

        Matches are non-overlapping and in page order. The caller decides when
        to stop, so the match cursor only advances as far as it is consumed.
        """
        scoped = self.scope(text, spec)
        for match in spec.entry_pattern.finditer(scoped):
            yield RawEntryMatch(match)

    def extract(self, text: str, spec: FeedSpec) -> list[RawEntryMatch]:
        """Find entry matches in page text.

        Scanning stops once ``spec.entry_max`` matches have been accepted.

        Args:
            text: Normalized page text
            spec: Feed definition

        Returns:
            Raw matches, first match first
        """
        matches: list[RawEntryMatch] = []

        for match in self.iter_matches(text, spec):
            matches.append(match)
            if len(matches) >= spec.entry_max:
                break

        logger.debug(f"Extracted {len(matches)} entries for '{spec.title}'")
        return matches


def create_extractor() -> PatternExtractor:
    """Create a PatternExtractor instance."""
    return PatternExtractor()
