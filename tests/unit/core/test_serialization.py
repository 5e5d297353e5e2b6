"""
Tests for JSON object serialization.
"""

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

import pytest

from stowage.core.errors import SerializationError
from stowage.core.serialization import deserialize, serialize


class Color(Enum):
    RED = "red"


@dataclass
class Point:
    x: int
    y: int


class TestSerialize:
    """Tests for serialize."""

    def test_tagged_values_keep_their_type(self):
        """Test datetime, UUID, Decimal, bytes and sets are restored."""
        value = {
            "when": datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC),
            "id": UUID("12345678-1234-5678-1234-567812345678"),
            "amount": Decimal("10.50"),
            "blob": b"\x00\xff",
            "tags": {"b", "a"},
            "frozen": frozenset({1}),
        }

        assert deserialize(serialize(value)) == value

    def test_output_is_utf8_json(self):
        """Test non-ASCII text is written as UTF-8, not escaped."""
        data = serialize({"name": "café"})

        assert "café".encode() in data
        assert json.loads(data) == {"name": "café"}

    def test_enum_is_written_as_value(self):
        """Test enums are stored by value."""
        assert deserialize(serialize({"color": Color.RED})) == {"color": "red"}

    def test_unsupported_type(self):
        """Test an object without a JSON form raises SerializationError."""
        with pytest.raises(SerializationError) as exc_info:
            serialize({"bad": object()})

        assert exc_info.value.operation == "serialize"
        assert exc_info.value.data_type == "dict"

    def test_untagged_dict_with_value_key_passes_through(self):
        """Test ordinary dicts that happen to use a "value" key are untouched."""
        value = {"__type__": "unknown", "value": 1}
        assert deserialize(serialize(value)) == value


class TestDeserialize:
    """Tests for deserialize."""

    def test_dataclass_is_built(self):
        """Test a dataclass type is constructed from the stored object."""
        assert deserialize(serialize(Point(1, 2)), Point) == Point(1, 2)

    def test_dataclass_from_non_object(self):
        """Test a non-object value cannot build a dataclass."""
        with pytest.raises(SerializationError, match="Expected an object"):
            deserialize(b"[1, 2]", Point)

    def test_dataclass_with_unknown_field(self):
        """Test mismatched fields raise SerializationError."""
        with pytest.raises(SerializationError, match="Cannot build Point"):
            deserialize(b'{"x": 1, "z": 2}', Point)

    def test_plain_type_check(self):
        """Test non-dataclass types only check the decoded value."""
        assert deserialize(b"[1]", list) == [1]
        with pytest.raises(SerializationError, match="Expected dict, got list"):
            deserialize(b"[1]", dict)

    @pytest.mark.parametrize("data", [b"{not json", b"\xff\xfe"])
    def test_malformed_input(self, data):
        """Test invalid JSON or bytes raise SerializationError."""
        with pytest.raises(SerializationError) as exc_info:
            deserialize(data)

        assert exc_info.value.operation == "deserialize"
