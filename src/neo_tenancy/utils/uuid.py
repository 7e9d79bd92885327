"""UUID utilities for neo-tenancy."""

import re
import time
import uuid
from typing import Any

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.I
)


def generate_uuid_v7() -> str:
    """
    Generate a UUIDv7 with time-based ordering.
    
    Time-ordered identifiers keep index locality in the storage collaborators.
    
    Returns:
        String representation of UUIDv7
    """
    # 48-bit millisecond timestamp
    timestamp_ms = int(time.time() * 1000)
    timestamp_bytes = timestamp_ms.to_bytes(6, byteorder="big")
    
    random_bytes = uuid.uuid4().bytes[6:]
    uuid_bytes = timestamp_bytes + random_bytes
    
    # Version 7
    uuid_bytes = uuid_bytes[:6] + bytes([(uuid_bytes[6] & 0x0F) | 0x70]) + uuid_bytes[7:]
    # RFC 4122 variant
    uuid_bytes = uuid_bytes[:8] + bytes([(uuid_bytes[8] & 0x3F) | 0x80]) + uuid_bytes[9:]
    
    return str(uuid.UUID(bytes=uuid_bytes))


def is_uuid_string(value: Any) -> bool:
    """Check whether value is a canonical hyphenated UUID string."""
    return isinstance(value, str) and bool(UUID_PATTERN.match(value))
