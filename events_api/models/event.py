"""Event-related data models."""

from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator
from pydantic_core import PydanticCustomError


DESCRIPTION_MAX_LENGTH = 500


class EventStatus(str, Enum):
    """Lifecycle status of an event."""

    ACTIVE = "active"
    CANCELLED = "cancelled"
    DONE = "done"


EVENT_STATUSES = tuple(status.value for status in EventStatus)

# Identifier keys a client may echo back in an update body.
IDENTIFIER_FIELDS = ("id", "_id")

# Field names a list query may filter on.
FILTER_FIELDS = ("location", "date", "status")


def parse_event_date(value):
    """
    Parse a submitted date into a naive UTC datetime.

    Accepts datetimes, ISO-8601 strings (date-only or with a time part) and
    milliseconds since the epoch, either as a number or as a digit-only string.
    """
    if isinstance(value, bool):
        raise PydanticCustomError("date_base", '"date" must be a valid date')

    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            value = int(text)
        else:
            try:
                value = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                raise PydanticCustomError("date_base", '"date" must be a valid date')

    if isinstance(value, (int, float)):
        try:
            value = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise PydanticCustomError("date_base", '"date" must be a valid date')

    if not isinstance(value, datetime):
        raise PydanticCustomError("date_base", '"date" must be a valid date')

    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class EventCreate(BaseModel):
    """Body of an event creation request."""

    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    # Messages overriding the generic ones, keyed by (field, pydantic error type).
    error_messages: ClassVar[Dict[Tuple[str, str], str]] = {
        ("title", "missing"): "Title is required",
        ("title", "string_too_short"): "Title is required",
        ("description", "string_too_short"): '"description" is not allowed to be empty',
        ("description", "string_too_long"): f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters",
        ("location", "missing"): "Location is required",
        ("location", "string_too_short"): "Location is required",
        ("date", "missing"): "Date is invalid or missing",
        ("date", "date_base"): "Date is invalid or missing",
    }

    title: str = Field(..., min_length=1, description="Event title")
    description: str = Field(None, min_length=1, max_length=DESCRIPTION_MAX_LENGTH, description="Event description")
    location: str = Field(..., min_length=1, description="Event location")
    date: datetime = Field(..., description="Event date")
    status: EventStatus = Field(default=EventStatus.ACTIVE, validate_default=True, description="Event status")

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        return parse_event_date(value)


class EventUpdate(BaseModel):
    """Partial set of event fields for an update request.

    Only fields present in the request are applied. An explicit null clears the
    description; the other fields cannot be null.
    """

    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    error_messages: ClassVar[Dict[Tuple[str, str], str]] = EventCreate.error_messages

    title: str = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    location: str = Field(None, min_length=1)
    date: datetime = None
    status: EventStatus = None

    @model_validator(mode="before")
    @classmethod
    def _drop_identifier(cls, data):
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if key not in IDENTIFIER_FIELDS}
        return data

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        return parse_event_date(value)

    def changes(self) -> Dict:
        """Fields supplied by the client, ready for a ``$set``."""
        return self.model_dump(exclude_unset=True)


class EventFilter(BaseModel):
    """Query parameters accepted by the event listing."""

    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    error_messages: ClassVar[Dict[Tuple[str, str], str]] = {}

    # At least one of these has to be supplied.
    required_any: ClassVar[Tuple[str, ...]] = FILTER_FIELDS

    location: Optional[str] = Field(None, min_length=3, max_length=50)
    date: Optional[datetime] = None
    status: Optional[EventStatus] = None

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        return parse_event_date(value)

    def to_query(self) -> Dict:
        """Equality constraints for the supplied filter fields."""
        return {field: value for field, value in self.model_dump().items() if value is not None}


class Event(BaseModel):
    """Stored event as returned to clients."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: str = Field(..., description="Store-assigned identifier")
    title: str
    description: Optional[str] = None
    location: str
    date: datetime
    status: EventStatus = Field(default=EventStatus.ACTIVE, validate_default=True)

    @field_serializer("date")
    def _serialize_date(self, value: datetime) -> datetime:
        # Stored dates are naive UTC.
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value
