"""
Data models for webhook relaying.
Typed field map, outgoing form payload and handler responses.
"""

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlencode

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegexPatterns:
    """Pre-compiled regex patterns for body value parsing."""

    ISO_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:$|T)")


class DateSlot(str, Enum):
    """Logical date fields that are split into year, month and day entries."""

    DATE = "date"
    DEADLINE = "deadline"


class DateComponent(str, Enum):
    """Reserved field map suffixes for decomposed dates."""

    YEAR = "_year"
    MONTH = "_month"
    DAY = "_day"


RESERVED_SUFFIXES = tuple(component.value for component in DateComponent)

FormValue = str | int


class FieldMap(BaseModel):
    """
    Mapping from logical body keys to upstream form field identifiers.

    Lookups of keys that are not mapped return ``None``; a missing entry is
    never an error. Entries with an empty identifier are dropped on load.
    """

    model_config = ConfigDict(frozen=True)

    entries: dict[str, str] = Field(default_factory=dict)

    @field_validator("entries", mode="before")
    @classmethod
    def coerce_identifiers(cls, v: Any) -> dict[str, str]:
        """Stringify identifiers and drop empty ones."""
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("Field map must be a JSON object")

        entries = {}
        for key, identifier in v.items():
            if identifier is None or identifier == "":
                continue
            entries[str(key)] = str(identifier)
        return entries

    @classmethod
    def from_json(cls, raw: str | None) -> "FieldMap":
        """
        Parse a JSON-encoded field map.

        Missing, unparsable or non-object configuration yields an empty map.
        """
        if not raw or not raw.strip():
            return cls()

        try:
            return cls(entries=json.loads(raw))
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"⚠️ Ignoring invalid field map configuration: {e}")
            return cls()

    def get(self, key: str) -> str | None:
        """Identifier for a logical key, or None when unmapped."""
        return self.entries.get(key)

    def plain_entries(self) -> list[tuple[str, str]]:
        """Entries matched directly against the body (no date suffixes)."""
        return [
            (key, identifier)
            for key, identifier in self.entries.items()
            if not key.endswith(RESERVED_SUFFIXES)
        ]

    def date_identifier(self, slot: DateSlot, component: DateComponent) -> str | None:
        """Identifier for one decomposed component of a date slot."""
        return self.entries.get(f"{slot.value}{component.value}")

    def __len__(self) -> int:
        return len(self.entries)


def parse_iso_date(value: Any) -> tuple[str, int, str] | None:
    """
    Split a ``yyyy-mm-dd`` string into year text, numeric month and day text.

    A trailing time part (``2024-03-07T10:00:00Z``) is ignored. Anything else
    returns None.
    """
    if not isinstance(value, str):
        return None

    match = RegexPatterns.ISO_DATE_PATTERN.match(value.strip())
    if not match:
        return None

    year, month, day = match.groups()
    return year, int(month), day


@dataclass
class FormPayload:
    """Ordered multiset of (identifier, value) pairs sent to the form endpoint."""

    fields: list[tuple[str, FormValue]] = field(default_factory=list)

    def append(self, identifier: str, value: FormValue) -> None:
        self.fields.append((identifier, value))

    def encode(self) -> str:
        """URL-encode the payload as an ``application/x-www-form-urlencoded`` body."""
        return urlencode(self.fields)

    def identifiers(self) -> list[str]:
        return [identifier for identifier, _ in self.fields]

    def __len__(self) -> int:
        return len(self.fields)


@dataclass
class HandlerResponse:
    """Framework-independent response produced by the relay handler."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] | None = None

    def body_bytes(self) -> bytes:
        """Serialized JSON body, or empty bytes for bodiless responses."""
        if self.body is None:
            return b""
        return json.dumps(self.body).encode("utf-8")


class HealthStatus(BaseModel):
    """Health check response."""

    status: str = "ok"


class RelayAccepted(BaseModel):
    """Successful relay response."""

    ok: bool = True


class ErrorBody(BaseModel):
    """Error response."""

    error: str
