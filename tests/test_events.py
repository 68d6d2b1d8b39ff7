"""
Tests for invocation payload normalization.
"""

import json

import pytest

from pescador.events import normalize_request
from pescador.exceptions import MalformedRequest


class TestNormalizeRequest:
    """Test normalize_request."""

    def test_json_string_body(self):
        event = {"body": json.dumps({"zip": "78704"}), "headers": {}}
        assert normalize_request(event, "zip") == {"zip": "78704"}

    def test_parsed_body(self):
        event = {"body": {"id": "08155500", "range": 3}}
        assert normalize_request(event, "id") == {"id": "08155500", "range": 3}

    def test_top_level_fields(self):
        event = {"zip": "78704"}
        assert normalize_request(event, "zip") == {"zip": "78704"}

    def test_body_takes_precedence(self):
        event = {"zip": "10001", "body": json.dumps({"zip": "78704"})}
        assert normalize_request(event, "zip")["zip"] == "78704"

    def test_missing_field(self):
        with pytest.raises(MalformedRequest, match="no zip found"):
            normalize_request({"location": "Austin"}, "zip")

    def test_body_without_required_field(self):
        with pytest.raises(MalformedRequest, match="no zip found"):
            normalize_request({"body": json.dumps({"location": "Austin"})}, "zip")

    def test_invalid_json_body(self):
        with pytest.raises(MalformedRequest, match="not valid JSON"):
            normalize_request({"body": "{zip: 78704"}, "zip")

    def test_non_object_json_body(self):
        with pytest.raises(MalformedRequest):
            normalize_request({"body": json.dumps(["78704"])}, "zip")

    @pytest.mark.parametrize("event", [None, "78704", 42, ["zip"]])
    def test_non_mapping_event(self, event):
        with pytest.raises(MalformedRequest):
            normalize_request(event, "zip")

    def test_error_is_structured(self):
        with pytest.raises(MalformedRequest) as exc_info:
            normalize_request({}, "zip")
        assert exc_info.value.to_dict()["kind"] == "malformed_request"
