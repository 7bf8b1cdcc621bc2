"""Database package for the Events API."""

from .connections import DatabaseManager
from .repositories import EventRepository

__all__ = [
    "DatabaseManager",
    "EventRepository",
]
