"""
Loading of feed definitions.

Feed definitions live in a YAML file, either as a ``feeds:`` list of records::

    feeds:
      - title: pyrax
        url: https://example.com/README.md
        file: feeds/pyrax.atom
        page.pattern: "<article (.*?)</article>"
        entry.pattern: '<h3>.*?href="(.*?)".*?</a>(.*?)</h3>'
        entry.max: 20
        entry.title.group: 2
        entry.url.group: 1
        entry.content.group: ""

or as flat indexed keys (``feed.0.title``, ``feed.0.url``...). Indexed feeds
are read from 0 upwards until the first index without a title.
"""

from pathlib import Path
from typing import Any, Iterable, Mapping, Union

import yaml
from pydantic import ValidationError

from page2atom.exceptions import ConfigurationError
from page2atom.logger import get_logger
from page2atom.models import FeedSpec

logger = get_logger(__name__)


def records_from_indexed_keys(mapping: Mapping[str, Any]) -> list[dict]:
    """Group ``feed.N.key`` entries into one record per feed.

    Args:
        mapping: Flat mapping of indexed keys to values

    Returns:
        Feed records in index order
    """
    records = []
    index = 0

    while f"feed.{index}.title" in mapping:
        prefix = f"feed.{index}."
        records.append(
            {key[len(prefix):]: value for key, value in mapping.items()
             if isinstance(key, str) and key.startswith(prefix)}
        )
        index += 1

    return records


def _stringify(record: Mapping[str, Any]) -> dict:
    # Records are string-valued; YAML may hand us ints for numeric fields
    return {
        str(key): value if value is None or isinstance(value, str) else str(value)
        for key, value in record.items()
    }


def parse_feed_specs(records: Iterable[Any]) -> list[FeedSpec]:
    """Validate feed records into FeedSpecs.

    Args:
        records: Feed records keyed as in the feeds file

    Returns:
        FeedSpecs in configuration order

    Raises:
        ConfigurationError: On a missing or duplicate title, a malformed
            pattern or an invalid group index
    """
    specs: list[FeedSpec] = []
    titles: set[str] = set()

    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise ConfigurationError("feed record must be a mapping", feed=f"#{index}")

        record = _stringify(record)
        title = (record.get("title") or "").strip()
        if not title:
            raise ConfigurationError("feed title is missing", feed=f"#{index}", key="title")
        if title in titles:
            raise ConfigurationError("duplicate feed title", feed=title, key="title")

        try:
            spec = FeedSpec.model_validate(record)
        except ValidationError as e:
            error = e.errors()[0]
            key = ".".join(str(part) for part in error["loc"]) or None
            raise ConfigurationError(error["msg"], feed=title, key=key) from e

        titles.add(title)
        specs.append(spec)

    return specs


def load_feed_specs(path: Union[str, Path]) -> list[FeedSpec]:
    """Load feed definitions from a YAML file.

    Args:
        path: Feeds file path

    Returns:
        FeedSpecs in configuration order, empty when no feed is defined

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    feeds_file = Path(path)
    if not feeds_file.is_file():
        raise ConfigurationError(f"feeds file not found: {feeds_file}")

    logger.info(f"Loading feed definitions from {feeds_file.resolve()}")

    try:
        with feeds_file.open("r", encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"malformed YAML in {feeds_file}: {e}") from e

    if document is None:
        records: list = []
    elif isinstance(document, list):
        records = document
    elif isinstance(document, Mapping) and "feeds" in document:
        records = document["feeds"] or []
        if not isinstance(records, list):
            raise ConfigurationError("'feeds' must be a list", key="feeds")
    elif isinstance(document, Mapping):
        records = records_from_indexed_keys(document)
    else:
        raise ConfigurationError(f"unexpected document in {feeds_file}")

    specs = parse_feed_specs(records)
    logger.info(f"Loaded definitions for {len(specs)} feeds")
    return specs
