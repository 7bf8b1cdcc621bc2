"""
Tests for Request Validation

This module contains tests for the event validation layer: rule checking,
error collection and message formatting.
"""

import pytest
from datetime import datetime

from events_api.models.event import EventCreate, EventFilter, EventUpdate
from events_api.models.validation import (
    EventValidationError,
    EventValidator,
    ValidationResult,
    format_error,
    get_event_validator,
)


class TestValidationResult:
    """Test ValidationResult class"""

    def test_valid_result(self):
        """Test creating a valid result"""
        result = ValidationResult()

        assert result.is_valid is True
        assert len(result.errors) == 0
        assert bool(result) is True
        assert str(result) == "Valid"

    def test_invalid_result(self):
        """Test invalid result with errors"""
        result = ValidationResult(value=object())
        result.add_error("This is an error")
        result.add_error("Another error")

        assert result.is_valid is False
        assert result.value is None
        assert len(result.errors) == 2
        assert bool(result) is False
        assert str(result) == "Invalid: This is an error; Another error"


class TestEventValidator:
    """Test EventValidator"""

    @pytest.fixture
    def validator(self):
        return EventValidator()

    def test_valid_creation(self, validator):
        """Test a complete creation payload"""
        payload = {
            "title": "Meetup",
            "description": "Monthly meetup",
            "location": "Hall A",
            "date": "2024-05-01T18:00:00Z",
            "status": "done",
        }

        result = validator.validate(EventCreate, payload)

        assert result
        assert result.value.date == datetime(2024, 5, 1, 18, 0)
        assert result.value.status == "done"

    def test_creation_collects_all_errors(self, validator):
        """Test every violated rule is reported"""
        payload = {"title": "", "description": "x" * 501, "date": "nope", "status": "pending"}

        result = validator.validate(EventCreate, payload)

        assert not result
        assert result.errors == [
            "Title is required",
            "Description cannot exceed 500 characters",
            "Location is required",
            "Date is invalid or missing",
            '"status" must be one of [active, cancelled, done]',
        ]

    def test_creation_description_at_limit(self, validator):
        """Test a 500 character description is accepted"""
        payload = {"title": "Meetup", "location": "Hall A", "date": "2024-05-01", "description": "x" * 500}

        assert validator.validate(EventCreate, payload)

    def test_creation_wrong_type(self, validator):
        """Test non-string titles"""
        result = validator.validate(EventCreate, {"title": 5, "location": "Hall A", "date": "2024-05-01"})

        assert result.errors == ['"title" must be a string']

    def test_creation_not_an_object(self, validator):
        """Test bodies that are not JSON objects"""
        result = validator.validate(EventCreate, ["Meetup"])

        assert result.errors == ['"value" must be of type object']

    def test_filter_requires_one_field(self, validator):
        """Test an empty query is rejected"""
        result = validator.validate_filter({})

        assert result.errors == ['"value" must contain at least one of [location, date, status]']

    def test_filter_unknown_parameter(self, validator):
        """Test unknown query parameters are reported with the missing filter"""
        result = validator.validate_filter({"page": "2"})

        assert result.errors == [
            '"page" is not allowed',
            '"value" must contain at least one of [location, date, status]',
        ]

    def test_filter_location_too_long(self, validator):
        """Test location filter upper bound"""
        result = validator.validate_filter({"location": "x" * 51})

        assert result.errors == ['"location" length must be less than or equal to 50 characters long']

    def test_filter_valid(self, validator):
        """Test a valid filter returns the parsed model"""
        result = validator.validate_filter({"date": "2024-05-01", "status": "active"})

        assert result
        assert isinstance(result.value, EventFilter)
        assert result.value.to_query() == {"date": datetime(2024, 5, 1), "status": "active"}

    def test_update_partial(self, validator):
        """Test updates only check supplied fields"""
        result = validator.validate(EventUpdate, {"status": "cancelled"})

        assert result
        assert result.value.changes() == {"status": "cancelled"}

    def test_update_empty_title(self, validator):
        """Test updates cannot blank out required fields"""
        result = validator.validate(EventUpdate, {"title": ""})

        assert result.errors == ["Title is required"]


class TestFormatError:
    """Test pydantic error formatting"""

    def test_request_location_prefix_is_stripped(self):
        """Test FastAPI body/query prefixes do not leak into messages"""
        error = {"type": "missing", "loc": ("body", "title"), "msg": "Field required"}

        assert format_error(error) == '"title" is required'

    def test_override_message(self):
        """Test per-field overrides win over generic messages"""
        error = {"type": "missing", "loc": ("title",), "msg": "Field required"}

        assert format_error(error, EventCreate.error_messages) == "Title is required"

    def test_unknown_type_falls_back_to_pydantic_message(self):
        """Test unmapped error types keep the pydantic message"""
        error = {"type": "int_parsing", "loc": ("query", "page"), "msg": "Input should be a valid integer"}

        assert format_error(error) == '"page" Input should be a valid integer'


def test_event_validation_error():
    """Test the exception carries the field details"""
    error = EventValidationError(["Title is required"])

    assert error.message == "Validation error"
    assert error.details == ["Title is required"]
    assert str(error) == "Validation error"


def test_get_event_validator_is_shared():
    """Test the global validator instance"""
    assert get_event_validator() is get_event_validator()
