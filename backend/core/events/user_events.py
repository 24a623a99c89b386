"""
User event schemas (auth-service).
"""
from typing import Any, Dict, Literal

from pydantic import Field

from .envelope import (
    BaseEventEnvelope,
    EventPayload,
    build_payload,
    format_timestamp,
    require_fields,
    require_values,
    stringify_id,
    utc_now_iso,
)
from .errors import MalformedDomainObject


class UserRegisteredPayload(EventPayload):
    user_id: str
    email: str
    name: str
    role: str
    created_at: str


class UserUpdatedPayload(EventPayload):
    user_id: str
    changes: Dict[str, Any]
    updated_at: str


class UserDeletedPayload(EventPayload):
    user_id: str
    deleted_at: str


class UserRegistered(BaseEventEnvelope):
    event_type: Literal["UserRegistered"] = Field("UserRegistered", alias="eventType")
    payload: UserRegisteredPayload


class UserUpdated(BaseEventEnvelope):
    event_type: Literal["UserUpdated"] = Field("UserUpdated", alias="eventType")
    payload: UserUpdatedPayload


class UserDeleted(BaseEventEnvelope):
    event_type: Literal["UserDeleted"] = Field("UserDeleted", alias="eventType")
    payload: UserDeletedPayload


def create_user_registered_event(user: Any) -> UserRegistered:
    """UserRegistered from a user entity; createdAt is copied from the entity."""
    values = require_fields("UserRegistered", user, {
        "user_id": ("id", "user_id"),
        "email": ("email",),
        "name": ("name",),
        "role": ("role",),
        "created_at": ("created_at",),
    })
    payload = build_payload(
        "UserRegistered",
        UserRegisteredPayload,
        user_id=stringify_id(values["user_id"]),
        email=values["email"],
        name=values["name"],
        role=getattr(values["role"], "value", values["role"]),
        created_at=format_timestamp(values["created_at"]),
    )
    return UserRegistered(payload=payload)


def create_user_updated_event(user_id: Any, changes: Dict[str, Any]) -> UserUpdated:
    """UserUpdated carrying only the changed fields; updatedAt is the event time."""
    require_values("UserUpdated", user_id=user_id, changes=changes)
    if not isinstance(changes, dict):
        raise MalformedDomainObject("UserUpdated", reason="changes must be a mapping of field to new value")
    payload = build_payload(
        "UserUpdated",
        UserUpdatedPayload,
        user_id=stringify_id(user_id),
        changes={field: format_timestamp(value) for field, value in changes.items()},
        updated_at=utc_now_iso(),
    )
    return UserUpdated(payload=payload)


def create_user_deleted_event(user_id: Any) -> UserDeleted:
    require_values("UserDeleted", user_id=user_id)
    payload = build_payload(
        "UserDeleted",
        UserDeletedPayload,
        user_id=stringify_id(user_id),
        deleted_at=utc_now_iso(),
    )
    return UserDeleted(payload=payload)
