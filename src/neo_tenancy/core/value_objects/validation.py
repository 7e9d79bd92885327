"""Plain validation functions for value objects.

Validation runs explicitly at construction time and returns a structured
result; constructors raise when the result is invalid.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence

from ...utils.uuid import is_uuid_string


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation run."""
    
    errors: List[str] = field(default_factory=list)
    
    @property
    def is_valid(self) -> bool:
        return not self.errors
    
    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Combine two results, keeping error order."""
        return ValidationResult(errors=[*self.errors, *other.errors])
    
    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls()
    
    @classmethod
    def fail(cls, *errors: str) -> "ValidationResult":
        return cls(errors=list(errors))


class ValidationRule:
    """Represents a single validation rule."""
    
    def __init__(
        self,
        name: str,
        validator: Callable[[Any], bool],
        error_message: str,
    ):
        """Initialize validation rule.
        
        Args:
            name: Rule identifier
            validator: Function that returns True if value is valid
            error_message: Error message for validation failures
        """
        self.name = name
        self.validator = validator
        self.error_message = error_message
    
    def validate(self, value: Any) -> Optional[str]:
        """Validate value against this rule.
        
        Returns:
            Error message if validation fails, None if valid
        """
        if not self.validator(value):
            return self.error_message
        return None


def not_empty(field_name: str = "Value") -> ValidationRule:
    """Rule: value must not be empty."""
    return ValidationRule(
        name="not_empty",
        validator=lambda v: bool(v) and bool(str(v).strip()),
        error_message=f"{field_name} must not be empty",
    )


def uuid_format(field_name: str = "ID") -> ValidationRule:
    """Rule: value must be a hyphenated UUID string."""
    return ValidationRule(
        name="uuid_format",
        validator=is_uuid_string,
        error_message=f"{field_name} must be a valid UUID format",
    )


def run_rules(value: Any, rules: Sequence[ValidationRule]) -> ValidationResult:
    """Run rules in order, stopping at the first failure."""
    for rule in rules:
        error = rule.validate(value)
        if error:
            return ValidationResult.fail(error)
    return ValidationResult.ok()


def validate_uuid(value: Any, field_name: str = "ID") -> ValidationResult:
    """Validate that value is a non-empty UUID-shaped string."""
    return run_rules(value, [not_empty(field_name), uuid_format(field_name)])
