"""Validation result types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable


@dataclass(frozen=True)
class FieldError:
    """A single field's reported failure message."""

    field_id: str
    message: str
    label: str | None = None

    def __str__(self) -> str:
        return f"{self.label or self.field_id}: {self.message}"


@dataclass(frozen=True)
class ValidationResult:
    """Immutable outcome of one validation pass.

    ``errors`` preserves field registration order and holds at most one
    entry per field. ``success`` is true exactly when ``errors`` is empty.
    """

    success: bool
    errors: tuple[FieldError, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any iterable of errors but store a tuple
        object.__setattr__(self, "errors", tuple(self.errors))
        if self.success != (not self.errors):
            raise ValueError(
                f"success={self.success} is inconsistent with {len(self.errors)} error(s)"
            )

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check success."""
        return self.success

    @classmethod
    def from_errors(cls, errors: Iterable[FieldError]) -> ValidationResult:
        """Create a result whose success flag is derived from the errors.

        Args:
            errors: Field errors in registration order

        Returns:
            ValidationResult
        """
        errors = tuple(errors)
        return cls(success=not errors, errors=errors)

    @classmethod
    def ok(cls) -> ValidationResult:
        """Create a successful result with no errors."""
        return cls(success=True, errors=())

    def errors_for(self, field_id: str) -> list[FieldError]:
        """Get the errors reported for a field."""
        return [error for error in self.errors if error.field_id == field_id]

    def has_errors_for(self, field_id: str) -> bool:
        """Check whether a field reported an error."""
        return any(error.field_id == field_id for error in self.errors)

    def messages(self) -> dict[str, str]:
        """Map each failing field id to its message."""
        return {error.field_id: error.message for error in self.errors}
