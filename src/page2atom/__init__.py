"""
page2atom - Turn arbitrary web pages into Atom feeds.

This package extracts entries from web pages with configured regular
expressions and incrementally merges them into persisted Atom files.
"""

__version__ = "0.1.0"
