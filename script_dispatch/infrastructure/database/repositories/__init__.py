"""SQLAlchemy-backed repository implementations."""

from .journal_repository import SqlJournalRepository

__all__ = ["SqlJournalRepository"]
