"""
Typed records built from statistics rows.

A record keeps the injected metadata and the CSV-derived fields as two
separate layers and only merges them when serialized.
"""

import math
import re
from collections.abc import Sequence
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

from haproxyStats.filename import CaptureMetadata

SCHEMA_VERSION = 1
RECORD_KIND = "stat"

# Keys the metadata layer writes into every serialized record
METADATA_KEYS = ("@timestamp", "@version", "host", "type")

NUMERIC_PATTERN = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")

FieldValue = Union[float, str]


class RecordMetadata(BaseModel):
    """Fixed metadata injected into every record of a run."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timestamp: str = Field(..., alias="@timestamp")
    version: int = Field(SCHEMA_VERSION, alias="@version")
    host: str
    kind: str = Field(RECORD_KIND, alias="type")

    @classmethod
    def from_capture(cls, capture: CaptureMetadata) -> "RecordMetadata":
        return cls(timestamp=capture.iso_timestamp, host=capture.host)


class TypedRecord(BaseModel):
    """One statistics row after numeric coercion."""
    model_config = ConfigDict(frozen=True)

    metadata: RecordMetadata
    columns: dict[str, FieldValue]

    def get(self, name: str, default: Any = None) -> Any:
        return self.columns.get(name, default)

    def __contains__(self, name: object) -> bool:
        return name in self.columns

    def to_dict(self) -> dict[str, Any]:
        """Metadata keys first, then the columns in header order."""
        result: dict[str, Any] = self.metadata.model_dump(by_alias=True)
        result.update(self.columns)
        return result


def is_numeric(text: str) -> bool:
    """
    Check whether text is a decimal numeral.

    Accepts an optional sign, a fractional part and an exponent, with
    surrounding whitespace. Rejects empty text, hex, inf and nan.
    """
    return bool(NUMERIC_PATTERN.match(text))


def coerce_value(text: str) -> FieldValue:
    """Return text as a float when it is a finite numeral, unchanged otherwise."""
    if is_numeric(text):
        number = float(text)
        # 1e999 overflows to inf, which has no JSON encoding
        if math.isfinite(number):
            return number
    return text


def build_record(header: Sequence[str], values: Sequence[str], metadata: RecordMetadata) -> TypedRecord:
    """
    Pair a row's values with the header and coerce each value.

    Args:
        header: Column names in file order
        values: Text values of one row, same length as header
        metadata: Metadata layer shared by every record of the run

    Returns:
        TypedRecord for the row
    """
    columns = {name: coerce_value(value) for name, value in zip(header, values)}
    return TypedRecord(metadata=metadata, columns=columns)
