"""
Unit tests for app/ai/itinerary_parser.py

Tests cover:
- Markdown fence stripping
- JSON parse failures
- Schema validation and the storage defaults applied to activities
"""
import json

import pytest

from app.ai.itinerary_parser import parse_itinerary, strip_code_fences
from app.core.errors import InvalidResponseFormatError


def _single_day(activity):
    return json.dumps({"days": [{"day_number": 1, "summary": "Arrival", "activities": [activity]}]})


# ---------------------------------------------------------------------------
# strip_code_fences
# ---------------------------------------------------------------------------

class TestStripCodeFences:
    def test_json_labeled_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```\n') == '{"a": 1}'

    def test_unfenced_text_only_trimmed(self):
        assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'


# ---------------------------------------------------------------------------
# parse_itinerary
# ---------------------------------------------------------------------------

class TestParseItinerary:
    def test_fenced_and_plain_parse_identically(self, itinerary_payload):
        plain = json.dumps(itinerary_payload)
        fenced = f"```json\n{plain}\n```"
        assert parse_itinerary(fenced) == parse_itinerary(plain)

    def test_non_json_is_rejected(self):
        with pytest.raises(InvalidResponseFormatError) as exc_info:
            parse_itinerary("Here is your itinerary: day 1 go to the beach")
        assert exc_info.value.status_code == 500
        assert "invalid" in exc_info.value.detail.lower()

    def test_empty_content_is_rejected(self):
        with pytest.raises(InvalidResponseFormatError):
            parse_itinerary("")

    def test_missing_fields_get_defaults(self):
        itinerary = parse_itinerary(_single_day({"place_name": "Baga Beach"}))
        activity = itinerary.days[0].activities[0]
        assert activity.time_slot == "morning"
        assert activity.duration_minutes == 60
        assert activity.estimated_cost == 0
        assert activity.transport_cost == 0
        assert activity.is_backup is False
        assert activity.sort_order is None

    def test_null_fields_get_defaults(self):
        itinerary = parse_itinerary(
            _single_day(
                {
                    "place_name": "Baga Beach",
                    "time_slot": None,
                    "duration_minutes": None,
                    "estimated_cost": None,
                    "transport_cost": None,
                    "is_backup": None,
                }
            )
        )
        activity = itinerary.days[0].activities[0]
        assert (activity.time_slot, activity.duration_minutes, activity.is_backup) == ("morning", 60, False)

    def test_labels_are_normalized(self):
        itinerary = parse_itinerary(
            _single_day({"place_name": "Fort Aguada", "time_slot": " Evening ", "transport_mode": "CAB"})
        )
        activity = itinerary.days[0].activities[0]
        assert activity.time_slot == "evening"
        assert activity.transport_mode == "cab"

    def test_invalid_record_reports_failing_fields(self):
        content = _single_day({"place_name": "Fort Aguada", "time_slot": "midnight", "duration_minutes": -5})
        with pytest.raises(InvalidResponseFormatError) as exc_info:
            parse_itinerary(content)
        fields = exc_info.value.details["fields"]
        assert "days.0.activities.0.time_slot" in fields
        assert "days.0.activities.0.duration_minutes" in fields

    def test_out_of_range_coordinates_rejected(self):
        content = _single_day({"place_name": "Nowhere", "coordinates": {"lat": 123.0, "lng": 73.8}})
        with pytest.raises(InvalidResponseFormatError) as exc_info:
            parse_itinerary(content)
        assert "days.0.activities.0.coordinates.lat" in exc_info.value.details["fields"]

    def test_duplicate_day_numbers_rejected(self):
        content = json.dumps({"days": [{"day_number": 1}, {"day_number": 1}]})
        with pytest.raises(InvalidResponseFormatError):
            parse_itinerary(content)

    def test_budget_breakdown_needs_all_categories(self, itinerary_payload):
        del itinerary_payload["budget_breakdown"]["miscellaneous"]
        with pytest.raises(InvalidResponseFormatError) as exc_info:
            parse_itinerary(json.dumps(itinerary_payload))
        assert "budget_breakdown.miscellaneous" in exc_info.value.details["fields"]

    def test_missing_days_rejected(self):
        with pytest.raises(InvalidResponseFormatError):
            parse_itinerary(json.dumps({"budget_breakdown": None}))

    def test_null_activities_become_empty(self):
        itinerary = parse_itinerary(json.dumps({"days": [{"day_number": 1, "activities": None}]}))
        assert itinerary.days[0].activities == []

    def test_blank_transport_mode_becomes_none(self):
        itinerary = parse_itinerary(
            _single_day({"place_name": "Fort Aguada", "time_slot": "", "transport_mode": "  "})
        )
        activity = itinerary.days[0].activities[0]
        assert activity.transport_mode is None
        assert activity.time_slot == "morning"
