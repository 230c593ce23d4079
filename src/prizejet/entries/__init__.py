"""Campaign entries: admission, lookup and bonus actions."""

from prizejet.entries.service import BASE_ENTRY_POINTS, EntryService

__all__ = ["BASE_ENTRY_POINTS", "EntryService"]
