"""
Time-ordered identifiers (UUIDv7) for entities, events and correlation ids.
"""
import os
import time
import uuid
from typing import Union


def uuid7() -> uuid.UUID:
    """
    Generate a UUIDv7: 48-bit millisecond timestamp, version nibble 0111,
    variant bits 10, the rest random.

    Ids generated later sort after ids generated earlier (at millisecond
    resolution), which keeps per-entity logs and broker keys readable.
    """
    timestamp_ms = int(time.time() * 1000)
    uuid_bytes = bytearray(timestamp_ms.to_bytes(6, byteorder='big') + os.urandom(10))
    uuid_bytes[6] = (uuid_bytes[6] & 0x0f) | 0x70
    uuid_bytes[8] = (uuid_bytes[8] & 0x3f) | 0x80
    return uuid.UUID(bytes=bytes(uuid_bytes))


def uuid7_str() -> str:
    """Generate UUIDv7 as string"""
    return str(uuid7())


def is_uuid7(value: Union[str, uuid.UUID]) -> bool:
    """Check if a value is a version 7 UUID"""
    if isinstance(value, str):
        try:
            value = uuid.UUID(value)
        except ValueError:
            return False
    return value.version == 7
