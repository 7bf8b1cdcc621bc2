"""Event repository for managing event documents."""

from typing import Any, Dict, List, Mapping, Optional

import structlog

from events_api.database.repositories.base import BaseRepository
from events_api.database.connections import DatabaseManager
from events_api.models.event import Event, EventCreate, EventFilter, EventUpdate


logger = structlog.get_logger(__name__)


class EventRepository(BaseRepository[Event]):
    """Repository for managing event documents in MongoDB."""

    def __init__(self, db_manager: DatabaseManager, collection_name: Optional[str] = None):
        """Initialize event repository."""
        super().__init__(db_manager, collection_name or db_manager.config.events_collection)
        self.logger = logger.bind(component="event_repository")

    def _document_to_model(self, document: Mapping[str, Any]) -> Event:
        """Convert a stored document to an Event model."""
        return Event(
            id=str(document['_id']),
            title=document['title'],
            description=document.get('description'),
            location=document['location'],
            date=document['date'],
            status=document.get('status', 'active'),
        )

    def _model_to_document(self, model: EventCreate) -> Dict[str, Any]:
        """Convert a validated creation request to a document."""
        document = model.model_dump()
        if document.get('description') is None:
            document.pop('description', None)
        return document

    async def update_by_id(self, event_id: str, changes: EventUpdate) -> Optional[Event]:
        """
        Apply the supplied fields to an event.

        Args:
            event_id: Identifier of the event
            changes: Fields sent by the client

        Returns:
            Updated event, or None if no event has that identifier
        """
        return await self.update(event_id, changes.changes())

    async def delete_by_id(self, event_id: str) -> bool:
        """Remove an event; False when no event has that identifier."""
        return await self.delete(event_id)

    async def find(self, event_filter: Optional[EventFilter] = None) -> List[Event]:
        """
        Find events matching a filter.

        Args:
            event_filter: Equality constraints on location, date and status;
                None or an empty filter matches every event

        Returns:
            Matching events in insertion order
        """
        criteria = event_filter.to_query() if event_filter else {}
        events = await self.find_by_criteria(criteria)

        self.logger.info("Found events", criteria=criteria, count=len(events))
        return events
