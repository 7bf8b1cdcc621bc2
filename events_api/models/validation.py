"""
Request Validation

This module validates event payloads and list queries against the event
models and turns every violation into a readable field message. Validation
never stops at the first problem: callers receive all of them, in order.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type

import structlog
from pydantic import BaseModel, ValidationError

from events_api.models.event import EVENT_STATUSES, EventFilter


logger = structlog.get_logger(__name__)

VALIDATION_ERROR_MESSAGE = "Validation error"

# Request locations FastAPI prefixes onto error paths.
_REQUEST_LOCATIONS = ("body", "query", "path")


class ValidationResult:
    """Result of validation operations"""

    def __init__(self, is_valid: bool = True, errors: Optional[List[str]] = None,
                 value: Optional[BaseModel] = None):
        self.is_valid = is_valid
        self.errors = errors or []
        self.value = value

    def add_error(self, error: str):
        """Add an error to the validation result"""
        self.errors.append(error)
        self.is_valid = False
        self.value = None

    def __bool__(self):
        """Return True if validation passed"""
        return self.is_valid

    def __str__(self):
        """String representation of validation result"""
        if self.is_valid:
            return "Valid"
        return f"Invalid: {'; '.join(self.errors)}"


class EventValidationError(Exception):
    """Raised when a request does not satisfy the declared field rules."""

    def __init__(self, details: List[str], message: str = VALIDATION_ERROR_MESSAGE):
        super().__init__(message)
        self.message = message
        self.details = details


def format_error(error: Mapping[str, Any],
                 messages: Optional[Mapping[Tuple[str, str], str]] = None) -> str:
    """
    Render one pydantic error as a field message.

    Args:
        error: Error entry from ``ValidationError.errors()``
        messages: Overrides keyed by (field, error type)

    Returns:
        Human-readable message naming the offending field
    """
    loc = [part for part in error.get("loc", ()) if part not in _REQUEST_LOCATIONS]
    field = str(loc[0]) if loc else "value"
    error_type = error.get("type", "")
    ctx = error.get("ctx") or {}

    if messages and (field, error_type) in messages:
        return messages[(field, error_type)]

    label = f'"{field}"'
    if error_type == "missing":
        return f"{label} is required"
    if error_type == "string_type":
        return f"{label} must be a string"
    if error_type == "string_too_short":
        return f"{label} length must be at least {ctx.get('min_length')} characters long"
    if error_type == "string_too_long":
        return f"{label} length must be less than or equal to {ctx.get('max_length')} characters long"
    if error_type in ("enum", "literal_error"):
        return f"{label} must be one of [{', '.join(EVENT_STATUSES)}]"
    if error_type == "extra_forbidden":
        return f"{label} is not allowed"
    if error_type in ("model_type", "model_attributes_type", "dict_type"):
        return f"{label} must be of type object"
    if error_type == "json_invalid":
        return "Request body is not valid JSON"
    if error_type == "date_base":
        return error.get("msg", f"{label} must be a valid date")
    return f"{label} {error.get('msg', 'is invalid')}"


def format_errors(errors: Iterable[Mapping[str, Any]],
                  messages: Optional[Mapping[Tuple[str, str], str]] = None) -> List[str]:
    """Render a sequence of pydantic errors, preserving their order."""
    return [format_error(error, messages) for error in errors]


class EventValidator:
    """Validates event request bodies and list queries"""

    def __init__(self):
        self.logger = logger.bind(component="event_validator")

    def validate(self, model: Type[BaseModel], payload: Any) -> ValidationResult:
        """
        Validate a payload against a request model.

        Args:
            model: Pydantic model declaring the field rules
            payload: Submitted data, normally a mapping of field to value

        Returns:
            ValidationResult carrying the validated model when valid
        """
        result = ValidationResult()
        messages = getattr(model, "error_messages", None)

        try:
            result.value = model.model_validate(payload)
        except ValidationError as e:
            for message in format_errors(e.errors(), messages):
                result.add_error(message)

        required_any = getattr(model, "required_any", ())
        if required_any:
            self._require_any(required_any, payload, result)

        if not result:
            self.logger.debug("Validation failed", model=model.__name__, errors=result.errors)
        return result

    def validate_filter(self, params: Mapping[str, Any]) -> ValidationResult:
        """Validate list query parameters."""
        return self.validate(EventFilter, dict(params))

    def _require_any(self, fields: Tuple[str, ...], payload: Any, result: ValidationResult) -> None:
        """At least one of ``fields`` has to be supplied."""
        supplied: Dict[str, Any] = payload if isinstance(payload, dict) else {}
        if not any(field in supplied for field in fields):
            result.add_error(f'"value" must contain at least one of [{", ".join(fields)}]')


# Global validator instance
_event_validator: Optional[EventValidator] = None


def get_event_validator() -> EventValidator:
    """Get the shared event validator."""
    global _event_validator
    if _event_validator is None:
        _event_validator = EventValidator()
    return _event_validator
