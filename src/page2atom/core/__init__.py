"""Core extraction and merge logic for page2atom.

Pipeline stages, leaves first:
    - PatternExtractor: page text → raw entry matches
    - EntryBuilder: raw matches → entries with absolute ids
    - FeedAssembler: entries → candidate feed
    - MergeEngine: candidate + persisted feed → feed to write

FeedPipeline wires them together with PageFetcher and AtomStore.
"""

from page2atom.core.assembler import FeedAssembler, create_assembler
from page2atom.core.builder import EntryBuilder, create_builder, resolve_link
from page2atom.core.extractor import (
    PatternExtractor,
    RawEntryMatch,
    create_extractor,
    normalize_page_text,
)
from page2atom.core.fetcher import FetchStats, PageFetcher, create_fetcher
from page2atom.core.merger import MergeAction, MergeEngine, MergeResult, create_merge_engine
from page2atom.core.pipeline import (
    FeedPipeline,
    FeedRunResult,
    RunMode,
    RunReport,
    create_pipeline,
)

__all__ = [
    # Stages
    "PatternExtractor",
    "EntryBuilder",
    "FeedAssembler",
    "MergeEngine",
    "PageFetcher",
    "FeedPipeline",
    # Factory functions
    "create_extractor",
    "create_builder",
    "create_assembler",
    "create_merge_engine",
    "create_fetcher",
    "create_pipeline",
    # Helpers
    "normalize_page_text",
    "resolve_link",
    # Result types
    "RawEntryMatch",
    "MergeAction",
    "MergeResult",
    "FetchStats",
    "FeedRunResult",
    "RunReport",
    # Enum types
    "RunMode",
]
