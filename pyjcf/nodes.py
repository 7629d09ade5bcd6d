"""
Base class for decoded records.
All records are frozen dataclasses; this adds JSON serialization.
"""

import dataclasses
import json
from abc import ABC
from enum import Enum, IntFlag

from .classfile import flag_names


class Node(ABC):
    """Base class for all decoded records."""

    def to_dict(self) -> dict:
        """Convert record to dictionary for JSON serialization."""
        result = {"_type": self.__class__.__name__}
        for f in dataclasses.fields(self):
            if f.name.startswith("_"):
                continue
            result[f.name] = _serialize_value(getattr(self, f.name))
        return result

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


def _serialize_value(value):
    """Helper to serialize a value for JSON."""
    if value is None:
        return None
    if isinstance(value, Node):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    if isinstance(value, IntFlag):
        return {"value": int(value), "flags": flag_names(value)}
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, str)):
        return value
    return str(value)
