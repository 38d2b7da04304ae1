"""Reusable FastAPI dependencies."""

from .container import get_app_container, get_db_session
from .services import get_journal_service, get_script_service, get_status_service

__all__ = [
    "get_app_container",
    "get_db_session",
    "get_journal_service",
    "get_script_service",
    "get_status_service",
]
