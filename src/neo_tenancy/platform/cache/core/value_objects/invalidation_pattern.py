"""Invalidation pattern value object.

Pattern matching of cache keys for bulk invalidation. Plain strings given to
the cache are treated as glob patterns (``*`` any run, ``?`` one character).
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Union


class PatternType(Enum):
    """Types of invalidation patterns supported."""

    EXACT = "exact"        # Exact string match
    WILDCARD = "wildcard"  # Glob with * and ?
    REGEX = "regex"        # Regular expression
    PREFIX = "prefix"
    SUFFIX = "suffix"


def _glob_to_regex(pattern: str) -> str:
    parts = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return "".join(parts)


@dataclass(frozen=True)
class InvalidationPattern:
    """Cache key pattern with exact, glob, prefix, suffix and regex modes."""

    pattern: str
    pattern_type: PatternType
    case_sensitive: bool = True

    def __post_init__(self):
        if not self.pattern:
            raise ValueError("Pattern cannot be empty")

        # Fail early on broken regexes
        if self.pattern_type == PatternType.REGEX:
            try:
                re.compile(self.pattern)
            except re.error as e:
                raise ValueError(f"Invalid regex pattern: {e}")

    @classmethod
    def exact(cls, pattern: str, case_sensitive: bool = True) -> "InvalidationPattern":
        return cls(pattern, PatternType.EXACT, case_sensitive)

    @classmethod
    def wildcard(cls, pattern: str, case_sensitive: bool = True) -> "InvalidationPattern":
        return cls(pattern, PatternType.WILDCARD, case_sensitive)

    @classmethod
    def regex(cls, pattern: str, case_sensitive: bool = True) -> "InvalidationPattern":
        return cls(pattern, PatternType.REGEX, case_sensitive)

    @classmethod
    def prefix(cls, prefix: str, case_sensitive: bool = True) -> "InvalidationPattern":
        return cls(prefix, PatternType.PREFIX, case_sensitive)

    @classmethod
    def suffix(cls, suffix: str, case_sensitive: bool = True) -> "InvalidationPattern":
        return cls(suffix, PatternType.SUFFIX, case_sensitive)

    @classmethod
    def tenant_keys(cls, tenant_id: str) -> "InvalidationPattern":
        """All keys under a tenant discriminator."""
        return cls.prefix(f"{tenant_id}:")

    @classmethod
    def entity_keys(cls, tenant_id: str, entity_name: str) -> "InvalidationPattern":
        """All repository keys of one entity type under a tenant."""
        return cls.prefix(f"{tenant_id}:repo:{entity_name}:")

    @classmethod
    def coerce(cls, value: Union[str, "InvalidationPattern"]) -> "InvalidationPattern":
        if isinstance(value, InvalidationPattern):
            return value
        return cls.wildcard(value)

    def compile(self) -> "re.Pattern":
        flags = 0 if self.case_sensitive else re.IGNORECASE

        if self.pattern_type == PatternType.EXACT:
            return re.compile(f"^{re.escape(self.pattern)}$", flags)
        if self.pattern_type == PatternType.PREFIX:
            return re.compile(f"^{re.escape(self.pattern)}", flags)
        if self.pattern_type == PatternType.SUFFIX:
            return re.compile(f"{re.escape(self.pattern)}$", flags)
        if self.pattern_type == PatternType.WILDCARD:
            return re.compile(f"^{_glob_to_regex(self.pattern)}$", flags | re.DOTALL)
        return re.compile(self.pattern, flags)

    def matches(self, cache_key: str) -> bool:
        return bool(self.compile().search(cache_key))

    def __str__(self) -> str:
        sensitivity = "case-sensitive" if self.case_sensitive else "case-insensitive"
        return f"{self.pattern_type.value}:'{self.pattern}' ({sensitivity})"
