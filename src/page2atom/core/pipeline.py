"""
Feed pipeline: fetch → extract → assemble → merge → persist, one feed at a time.
"""

import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, TextIO

from page2atom.core.assembler import FeedAssembler
from page2atom.core.fetcher import PageFetcher
from page2atom.core.merger import MergeAction, MergeEngine
from page2atom.exceptions import Page2AtomError
from page2atom.logger import get_logger
from page2atom.models import Feed, FeedSpec
from page2atom.storage import AtomStore

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RunMode(str, Enum):
    """Whether a run writes feeds or only previews them."""

    EXECUTE = "execute"
    PREVIEW = "preview"


@dataclass
class FeedRunResult:
    """Result of running the pipeline for one feed."""

    title: str
    file: str
    action: Optional[MergeAction] = None
    candidate_entries: int = 0
    new_entries: int = 0
    written: bool = False
    error: Optional[str] = None

    def __post_init__(self):
        """Validate run result."""
        if self.error and self.written:
            raise ValueError("Failed feed run cannot have written a file")

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class RunReport:
    """Outcome of a whole run."""

    mode: RunMode
    results: list[FeedRunResult] = field(default_factory=list)

    def add_result(self, result: FeedRunResult) -> None:
        self.results.append(result)

    @property
    def success(self) -> bool:
        """True when every feed ran without error."""
        return all(result.success for result in self.results)

    @property
    def failed(self) -> list[FeedRunResult]:
        return [result for result in self.results if not result.success]

    @property
    def files_written(self) -> int:
        return sum(1 for result in self.results if result.written)

    @property
    def total_new_entries(self) -> int:
        return sum(result.new_entries for result in self.results if result.written)


class FeedPipeline:
    """Runs feed definitions through extraction and merge.

    Feeds share nothing; each run owns its candidate and persisted feed.
    """

    def __init__(
        self,
        fetcher: Optional[PageFetcher] = None,
        assembler: Optional[FeedAssembler] = None,
        merge_engine: Optional[MergeEngine] = None,
        store: Optional[AtomStore] = None,
        clock: Callable[[], datetime] = utcnow,
        preview_stream: Optional[TextIO] = None,
    ):
        """Initialize feed pipeline.

        Args:
            fetcher: Page fetcher
            assembler: Feed assembler
            merge_engine: Merge engine
            store: Atom file store
            clock: Returns the current time
            preview_stream: Where preview runs print feeds, defaults to stdout
        """
        self.fetcher = fetcher or PageFetcher()
        self.assembler = assembler or FeedAssembler()
        self.merge_engine = merge_engine or MergeEngine()
        self.store = store or AtomStore()
        self.clock = clock
        self.preview_stream = preview_stream

    def build_candidate(self, spec: FeedSpec, now: datetime) -> Feed:
        """Fetch the page of a feed and extract the candidate feed."""
        page_text = self.fetcher.fetch_page(spec.url)
        return self.assembler.assemble_from_page(spec, page_text, now)

    def run_feed(self, spec: FeedSpec, mode: RunMode = RunMode.EXECUTE) -> FeedRunResult:
        """Run the pipeline for a single feed.

        The persisted file is read at most once and written at most once.

        Args:
            spec: Feed definition
            mode: EXECUTE writes the merged feed, PREVIEW prints it instead

        Returns:
            FeedRunResult for the feed

        Raises:
            Page2AtomError: If fetching, parsing or writing fails
        """
        now = self.clock()
        candidate = self.build_candidate(spec, now)

        persisted = self.store.read(spec.file, feed_title=spec.title)
        result = self.merge_engine.merge(candidate, persisted, now, source=spec.file)

        run_result = FeedRunResult(
            title=spec.title,
            file=spec.file,
            action=result.action,
            candidate_entries=len(candidate.entries),
            new_entries=result.new_entries,
        )

        if mode is RunMode.PREVIEW:
            self._preview(spec, result.feed or candidate, result.action)
            return run_result

        if not result.should_write:
            return run_result

        self.store.write(result.feed, spec.file)
        run_result.written = True

        path = Path(spec.file).resolve()
        if result.action is MergeAction.CREATE:
            logger.info(f"Created new Atom file {path} ({result.new_entries} new entries)")
        else:
            logger.info(f"Appended to Atom file {path} ({result.new_entries} new entries)")

        return run_result

    def run(
        self,
        specs: list[FeedSpec],
        mode: RunMode = RunMode.EXECUTE,
        fail_fast: bool = False,
    ) -> RunReport:
        """Run the pipeline for every feed, in configuration order.

        A failing feed is logged and recorded; the remaining feeds still run
        unless fail_fast is set. Feeds written before a failure stay on disk.

        Args:
            specs: Feed definitions
            mode: Run mode passed to every feed
            fail_fast: Stop at the first failing feed

        Returns:
            RunReport with one result per feed that was attempted
        """
        report = RunReport(mode=mode)
        logger.info(f"BEGIN Generating Feeds ({len(specs)} feeds, {mode.value})")

        try:
            for spec in specs:
                try:
                    result = self.run_feed(spec, mode)
                except Page2AtomError as e:
                    logger.error(f"Feed '{spec.title}' failed: {e}")
                    result = FeedRunResult(title=spec.title, file=spec.file, error=str(e))

                report.add_result(result)

                if fail_fast and not result.success:
                    break
        finally:
            stats = self.fetcher.stats
            logger.info(
                f"END Generating Feeds ({report.files_written} written, "
                f"{len(report.failed)} failed, "
                f"{stats.successful_fetches}/{stats.total_pages} pages fetched)"
            )
            if stats.errors_by_type:
                logger.warning(f"Fetch errors by type: {stats.errors_by_type}")

        return report

    def _preview(self, spec: FeedSpec, feed: Feed, action: MergeAction) -> None:
        stream = self.preview_stream or sys.stdout
        stream.write(f"File: {Path(spec.file).resolve()} ({action.value})\n\n")
        stream.write(self.store.render(feed))
        stream.write("\n\n")


def create_pipeline(
    fetcher: Optional[PageFetcher] = None,
    store: Optional[AtomStore] = None,
    preview_stream: Optional[TextIO] = None,
) -> FeedPipeline:
    """Create a FeedPipeline with default components.

    Args:
        fetcher: Optional page fetcher override
        store: Optional store override
        preview_stream: Optional preview output stream

    Returns:
        Configured FeedPipeline instance
    """
    return FeedPipeline(fetcher=fetcher, store=store, preview_stream=preview_stream)
