"""
Data models for page2atom.

This module contains the validated feed definitions and the immutable Atom
feed values passed between pipeline stages.
"""

from page2atom.models.feed import Entry, Feed, Link
from page2atom.models.feed_spec import FeedSpec

__all__ = [
    "Entry",
    "Feed",
    "FeedSpec",
    "Link",
]
