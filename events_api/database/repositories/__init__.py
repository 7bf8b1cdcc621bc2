"""Database repositories for data access layer."""

from .base import BaseRepository
from .event_repository import EventRepository

__all__ = [
    "BaseRepository",
    "EventRepository",
]
