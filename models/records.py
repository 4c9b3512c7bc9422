"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

# Python attribute -> document field name used by the device firmware.
DOCUMENT_FIELDS: Dict[str, str] = {
    "flow1": "Flow1",
    "flow2": "Flow2",
    "temp_c1": "tempC1",
    "temp_c2": "tempC2",
    "temp_c3": "tempC3",
    "temp_c4": "tempC4",
}


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime."""
    candidate = value.strip()
    if not candidate:
        raise ValueError("Timestamp is empty.")

    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ValueError("Invalid timestamp format") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a datetime the way ``Date.prototype.toISOString`` does."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


@dataclass(frozen=True, slots=True)
class Sample:
    """A single sensor reading as stored by the device."""

    device: str
    time: str
    flow1: Optional[Any] = None
    flow2: Optional[Any] = None
    temp_c1: Optional[Any] = None
    temp_c2: Optional[Any] = None
    temp_c3: Optional[Any] = None
    temp_c4: Optional[Any] = None

    @property
    def timestamp(self) -> datetime:
        return parse_timestamp(self.time)

    def coalesced(self) -> "Sample":
        """Return a copy with missing numeric fields replaced by ``0``."""
        changes = {
            name: 0 for name in DOCUMENT_FIELDS if getattr(self, name) is None
        }
        return replace(self, **changes) if changes else self

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Sample":
        device = document.get("device")
        time = document.get("time")
        if not isinstance(device, str) or not device:
            raise ValueError("Sample document is missing a device identifier.")
        if not isinstance(time, str) or not time:
            raise ValueError("Sample document is missing a timestamp.")
        parse_timestamp(time)
        values = {name: document.get(key) for name, key in DOCUMENT_FIELDS.items()}
        return cls(device=device, time=time, **values)

    def to_document(self) -> Dict[str, Any]:
        document: Dict[str, Any] = {"device": self.device, "time": self.time}
        for field in fields(self):
            key = DOCUMENT_FIELDS.get(field.name)
            if key is not None:
                document[key] = getattr(self, field.name)
        return document
