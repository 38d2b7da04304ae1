"""Exports for dispatch journal domain"""

from .models import JournalEntry

__all__ = ["JournalEntry"]
