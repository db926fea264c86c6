"""
Atom file storage.

Reads and writes Atom 1.0 documents with xml.etree.ElementTree. Entry
summaries are written as ``type="html"`` text, so the captured markup comes
back from a read exactly as it was written.
"""

import os
import tempfile
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from page2atom.exceptions import ParseError, PersistenceError
from page2atom.logger import get_logger
from page2atom.models import Entry, Feed, Link

logger = get_logger(__name__)

ATOM_NS = "http://www.w3.org/2005/Atom"

ET.register_namespace("", ATOM_NS)

PathLike = Union[str, Path]


def _tag(name: str) -> str:
    return f"{{{ATOM_NS}}}{name}"


def format_timestamp(value: datetime) -> str:
    """Format a datetime as an RFC 3339 UTC timestamp."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware datetime.

    Raises:
        ValueError: If the value is not a valid timestamp
    """
    value = value.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class AtomStore:
    """Persists feeds as Atom files."""

    def read(self, path: PathLike, feed_title: Optional[str] = None) -> Optional[Feed]:
        """Read a feed from an Atom file.

        Args:
            path: Atom file path
            feed_title: Title of the configured feed, used in error messages

        Returns:
            Feed with entries in document order, or None if the file does not exist

        Raises:
            ParseError: If the file is not a well-formed Atom feed
        """
        path = Path(path)
        if not path.is_file():
            return None

        try:
            root = ET.parse(path).getroot()
        except ET.ParseError as e:
            raise ParseError(str(path), f"malformed XML: {e}", feed=feed_title) from e
        except OSError as e:
            raise ParseError(str(path), f"cannot read file: {e}", feed=feed_title) from e

        try:
            feed = self._feed_from_element(root)
        except (KeyError, ValueError) as e:
            raise ParseError(str(path), str(e), feed=feed_title) from e

        logger.debug(f"Read {len(feed.entries)} entries from {path}")
        return feed

    def write(self, feed: Feed, path: PathLike) -> None:
        """Write a feed to an Atom file.

        The document is written to a temporary file next to the target and
        moved into place, so a failed write leaves the previous file intact.

        Args:
            feed: Feed to write
            path: Atom file path

        Raises:
            PersistenceError: On any I/O failure
        """
        path = Path(path)
        data = self.serialize(feed)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.chmod(tmp_name, 0o644)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(str(path), str(e)) from e

        logger.debug(f"Wrote {len(feed.entries)} entries to {path}")

    def serialize(self, feed: Feed) -> bytes:
        """Serialize a feed to an Atom document."""
        root = self._feed_to_element(feed)
        ET.indent(root, space="  ")
        return ET.tostring(root, encoding="utf-8", xml_declaration=True) + b"\n"

    def render(self, feed: Feed) -> str:
        """Render a feed as a pretty-printed Atom document."""
        return self.serialize(feed).decode("utf-8")

    def _feed_to_element(self, feed: Feed) -> ET.Element:
        root = ET.Element(_tag("feed"))

        ET.SubElement(root, _tag("id")).text = feed.id
        ET.SubElement(root, _tag("title"), type="text").text = feed.title
        if feed.subtitle:
            ET.SubElement(root, _tag("subtitle"), type="text").text = feed.subtitle
        ET.SubElement(root, _tag("updated")).text = format_timestamp(feed.updated)

        if feed.author:
            author = ET.SubElement(root, _tag("author"))
            ET.SubElement(author, _tag("name")).text = feed.author

        for link in feed.links:
            attrs = {"href": link.href}
            if link.rel:
                attrs["rel"] = link.rel
            ET.SubElement(root, _tag("link"), attrs)

        for entry in feed.entries:
            root.append(self._entry_to_element(entry))

        return root

    def _entry_to_element(self, entry: Entry) -> ET.Element:
        element = ET.Element(_tag("entry"))

        ET.SubElement(element, _tag("id")).text = entry.id
        ET.SubElement(element, _tag("title"), type="text").text = entry.title
        ET.SubElement(element, _tag("updated")).text = format_timestamp(entry.updated)
        ET.SubElement(element, _tag("link"), href=entry.link)
        if entry.summary is not None:
            ET.SubElement(element, _tag("summary"), type="html").text = entry.summary

        return element

    def _feed_from_element(self, root: ET.Element) -> Feed:
        if root.tag != _tag("feed"):
            raise ValueError(f"root element is {root.tag!r}, expected an Atom feed")

        links = tuple(
            Link(href=link.attrib["href"], rel=link.get("rel"))
            for link in root.findall(_tag("link"))
        )

        return Feed(
            id=self._required_text(root, "id", "feed"),
            title=self._text(root, "title"),
            subtitle=self._text(root, "subtitle"),
            author=self._text(root, f"{_tag('author')}/{_tag('name')}", qualified=True),
            links=links,
            updated=parse_timestamp(self._required_text(root, "updated", "feed")),
            entries=tuple(self._entry_from_element(e) for e in root.findall(_tag("entry"))),
        )

    def _entry_from_element(self, element: ET.Element) -> Entry:
        summary = element.find(_tag("summary"))

        return Entry(
            id=self._required_text(element, "id", "entry"),
            title=self._text(element, "title"),
            summary=(summary.text or "") if summary is not None else None,
            updated=parse_timestamp(self._required_text(element, "updated", "entry")),
        )

    def _text(self, element: ET.Element, name: str, qualified: bool = False) -> str:
        child = element.find(name if qualified else _tag(name))
        if child is None or child.text is None:
            return ""
        return child.text

    def _required_text(self, element: ET.Element, name: str, owner: str) -> str:
        text = self._text(element, name).strip()
        if not text:
            raise ValueError(f"{owner} is missing <{name}>")
        return text


def create_store() -> AtomStore:
    """Create an AtomStore instance."""
    return AtomStore()
