"""
Event envelope base types and the field-extraction helpers shared by the
per-domain schema modules.

An envelope is `{eventType, payload}`: a frozen pydantic model whose
`event_type` is a Literal discriminant and whose payload model forbids
unknown fields. Envelopes serialize with camelCase keys.
"""
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Dict, Sequence, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from .errors import MalformedDomainObject

PayloadT = TypeVar("PayloadT", bound="EventPayload")
EnvelopeT = TypeVar("EnvelopeT", bound="BaseEventEnvelope")

_MISSING = object()


class EventPayload(BaseModel):
    """Schema-fixed payload: unknown fields are rejected, nothing is optional."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


class BaseEventEnvelope(BaseModel):
    """Common behaviour of every `{eventType, payload}` envelope."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready mapping with wire (camelCase) field names."""
        return self.model_dump(by_alias=True, mode="json")


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return format_timestamp(datetime.now(timezone.utc))


def format_timestamp(value: Any) -> Any:
    """
    Render datetimes the way generated event-time fields are rendered.
    Strings are copied verbatim; anything else is left to payload validation.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return value


def is_absent(value: Any) -> bool:
    """None and blank strings count as a missing required field."""
    return value is None or (isinstance(value, str) and not value.strip())


def read_field(source: Any, *names: str) -> Any:
    """
    Look a field up on a mapping or an attribute object.

    Each candidate name is tried as given and in camelCase, so dataclass
    entities (`created_at`) and wire-shaped dicts (`createdAt`) both work.
    Returns _MISSING when no candidate is present or the value is None or
    a blank string.
    """
    if source is None:
        return _MISSING
    for name in names:
        for candidate in (name, to_camel(name)):
            if isinstance(source, Mapping):
                value = source.get(candidate, _MISSING)
            else:
                value = getattr(source, candidate, _MISSING)
            if value is not _MISSING and not is_absent(value):
                return value
    return _MISSING


def require_fields(event_type: str, source: Any, fields: Dict[str, Sequence[str]]) -> Dict[str, Any]:
    """
    Extract every required field or fail with MalformedDomainObject listing
    all of the missing ones.

    `fields` maps the payload field name to the candidate source names.
    """
    values: Dict[str, Any] = {}
    missing = []
    for field_name, candidates in fields.items():
        value = read_field(source, *candidates)
        if value is _MISSING:
            missing.append(to_camel(field_name))
        else:
            values[field_name] = value
    if missing:
        raise MalformedDomainObject(event_type, missing)
    return values


def require_values(event_type: str, **values: Any) -> None:
    """Scalar-argument constructors: every argument must be present."""
    missing = [to_camel(name) for name, value in values.items() if is_absent(value)]
    if missing:
        raise MalformedDomainObject(event_type, missing)


def build_payload(event_type: str, payload_cls: Type[PayloadT], **values: Any) -> PayloadT:
    """Validate a payload, translating schema violations into MalformedDomainObject."""
    try:
        return payload_cls(**values)
    except ValidationError as exc:
        reason = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise MalformedDomainObject(event_type, reason=reason) from exc


def stringify_id(value: Any) -> Any:
    """Identifiers travel as strings (UUIDs, ObjectIds and ints included)."""
    if isinstance(value, (str, bytes)) or value is _MISSING:
        return value
    return str(value)
