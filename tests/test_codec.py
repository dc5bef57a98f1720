"""Tests for the record codec."""

import json
from dataclasses import dataclass

import pytest

from response_cache.entities import ResponseRecord
from response_cache.exceptions import SerializationError
from response_cache.repositories import codec


@pytest.fixture(autouse=True)
def isolated_registry(monkeypatch):
    monkeypatch.setattr(codec, "_registry", {})


@dataclass
class Marker:
    value: int

    def to_dict(self):
        return {"value": self.value}

    @classmethod
    def from_dict(cls, data):
        return cls(value=data["value"])


def test_registered_record_round_trips():
    codec.register_response_record()
    record = ResponseRecord(status=200, headers={"x-a": ["1", "2"]}, body=b"\x00\xffbinary")

    assert codec.loads(codec.dumps(record)) == record


def test_encoded_record_is_tagged_json():
    codec.register_response_record()
    payload = json.loads(codec.dumps(ResponseRecord(status=204)))

    assert payload[codec.TYPE_TAG] == "response_record"
    assert payload["data"]["status"] == 204


def test_unregistered_type_cannot_be_encoded():
    with pytest.raises(SerializationError):
        codec.dumps(ResponseRecord(status=200))


def test_unregistered_tag_cannot_be_decoded():
    raw = json.dumps({codec.TYPE_TAG: "marker", "data": {"value": 1}})
    with pytest.raises(SerializationError):
        codec.loads(raw)


def test_custom_type_registration():
    codec.register_type("marker", Marker)
    assert codec.loads(codec.dumps(Marker(3))) == Marker(3)


def test_conflicting_registration_is_rejected():
    codec.register_type("marker", Marker)
    codec.register_type("marker", Marker)
    with pytest.raises(ValueError):
        codec.register_type("marker", ResponseRecord)


def test_plain_json_values_pass_through():
    assert codec.loads(codec.dumps({"a": [1, 2]})) == {"a": [1, 2]}


def test_invalid_payloads():
    with pytest.raises(SerializationError):
        codec.loads(b"\x80not json")
    with pytest.raises(SerializationError):
        codec.dumps(object())
