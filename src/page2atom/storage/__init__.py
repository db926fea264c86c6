"""Storage layer for persisted Atom feeds."""

from page2atom.storage.atom import AtomStore, create_store

__all__ = [
    "AtomStore",
    "create_store",
]
