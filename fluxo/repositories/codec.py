"""Conversions between domain values and BSON documents."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict

from bson import Decimal128, ObjectId
from bson.errors import InvalidId


def to_object_id(value: str):
    """ObjectId for a valid id string, None otherwise."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def encode_value(value: Any) -> Any:
    # Decimal128 keeps every digit; dates stay date-only as ISO strings
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return Decimal128(str(value))
    if isinstance(value, date) and not isinstance(value, datetime):
        return value.isoformat()
    return value


def encode_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {key: encode_value(value) for key, value in fields.items() if key != "id"}


def decode_document(doc: Dict[str, Any]) -> Dict[str, Any]:
    decoded = {}
    for key, value in doc.items():
        if isinstance(value, Decimal128):
            value = value.to_decimal()
        decoded[key] = value
    decoded["_id"] = str(doc["_id"])
    return decoded
