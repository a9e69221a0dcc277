"""
Journal persistence and export: JSON stores, CSV export.
"""

from journal.export import CSV_HEADER, export_csv, journal_to_csv
from journal.store import AccountSizeStore, JournalStore

__all__ = ["AccountSizeStore", "CSV_HEADER", "JournalStore", "export_csv", "journal_to_csv"]
