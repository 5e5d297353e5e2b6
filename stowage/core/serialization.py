"""
JSON encoding for objects written through a provider.

Tagged values keep their Python type across a write/read cycle:
datetime, UUID, Decimal, bytes, set and frozenset. Dataclasses are
written as plain objects and rebuilt by read_object when their type is
given.
"""

import base64
import dataclasses
import json
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from stowage.core.errors import SerializationError

_TAG = "__type__"

_DECODERS = {
    "datetime": datetime.fromisoformat,
    "uuid": UUID,
    "decimal": Decimal,
    "bytes": base64.b64decode,
    "set": set,
    "frozenset": frozenset,
}


class ObjectEncoder(json.JSONEncoder):
    """JSON encoder that tags non-JSON types so object_hook can restore them."""

    def default(self, obj: Any) -> Any:
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
        if isinstance(obj, datetime):
            return {_TAG: "datetime", "value": obj.isoformat()}
        if isinstance(obj, UUID):
            return {_TAG: "uuid", "value": str(obj)}
        if isinstance(obj, Decimal):
            return {_TAG: "decimal", "value": str(obj)}
        if isinstance(obj, bytes):
            return {_TAG: "bytes", "value": base64.b64encode(obj).decode("ascii")}
        if isinstance(obj, (set, frozenset)):
            return {_TAG: type(obj).__name__, "value": sorted(obj, key=repr)}
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def object_hook(obj: dict[str, Any]) -> Any:
    """Reverse the tagging done by ObjectEncoder; untagged dicts pass through."""
    decoder = _DECODERS.get(obj.get(_TAG)) if len(obj) == 2 and "value" in obj else None
    return decoder(obj["value"]) if decoder else obj


def serialize(obj: Any) -> bytes:
    """
    Encode obj as UTF-8 JSON.

    Raises:
        SerializationError: If obj (or a nested value) has no JSON form
    """
    try:
        return json.dumps(obj, cls=ObjectEncoder, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(
            f"Failed to serialize {type(obj).__name__}: {e}",
            operation="serialize",
            data_type=type(obj).__name__,
        ) from e


def deserialize(data: bytes | str, object_type: type | None = None) -> Any:
    """
    Decode JSON, optionally rebuilding an instance of object_type.

    Dataclass types are constructed from the decoded object's fields;
    for any other type the decoded value must already be an instance.

    Raises:
        SerializationError: On malformed JSON or a value of the wrong shape
    """
    type_name = object_type.__name__ if object_type else None
    try:
        value = json.loads(data, object_hook=object_hook)
    except (UnicodeDecodeError, ValueError) as e:
        raise SerializationError(
            f"Failed to deserialize: {e}", operation="deserialize", data_type=type_name
        ) from e

    if object_type is None:
        return value

    if dataclasses.is_dataclass(object_type):
        if not isinstance(value, dict):
            msg = f"Expected an object for {type_name}, got {type(value).__name__}"
            raise SerializationError(msg, operation="deserialize", data_type=type_name)
        try:
            return object_type(**value)
        except TypeError as e:
            raise SerializationError(
                f"Cannot build {type_name}: {e}", operation="deserialize", data_type=type_name
            ) from e

    if not isinstance(value, object_type):
        msg = f"Expected {type_name}, got {type(value).__name__}"
        raise SerializationError(msg, operation="deserialize", data_type=type_name)
    return value
