"""Comparison bounds shared by the length and number assertions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, TYPE_CHECKING

from ..exceptions import ConfigurationError
from .base import Assertion, AssertionBuilder

if TYPE_CHECKING:
    from collections.abc import Callable


class BoundKind(Enum):
    """The comparison a bound performs."""

    EXACTLY = "exactly"
    LESS_THAN = "less_than"
    AT_MOST = "at_most"
    AT_LEAST = "at_least"
    GREATER_THAN = "greater_than"
    UNSET = "unset"


@dataclass(frozen=True)
class Bound:
    """A single comparison against a fixed integer.

    Exactly one kind is active per bound, so an assertion holding one
    ``Bound`` can never be configured with two competing modes.
    """

    kind: BoundKind
    value: int | None = None

    UNSET: ClassVar[Bound]

    def __post_init__(self) -> None:
        if self.kind is BoundKind.UNSET:
            if self.value is not None:
                raise ValueError("an unset bound cannot carry a value")
        elif self.value is None:
            raise ValueError(f"bound '{self.kind.value}' requires a value")

    @property
    def is_set(self) -> bool:
        return self.kind is not BoundKind.UNSET

    def satisfied_by(self, actual: int) -> bool:
        """Check a measured value against this bound.

        An unset bound is never satisfied.
        """
        if self.kind is BoundKind.EXACTLY:
            return actual == self.value
        if self.kind is BoundKind.LESS_THAN:
            return actual < self.value  # type: ignore[operator]
        if self.kind is BoundKind.AT_MOST:
            return actual <= self.value  # type: ignore[operator]
        if self.kind is BoundKind.AT_LEAST:
            return actual >= self.value  # type: ignore[operator]
        if self.kind is BoundKind.GREATER_THAN:
            return actual > self.value  # type: ignore[operator]
        return False

    def __str__(self) -> str:
        if not self.is_set:
            return "unset"
        return f"{self.kind.value.replace('_', ' ')} {self.value}"


Bound.UNSET = Bound(BoundKind.UNSET)


class BoundedBuilder(AssertionBuilder):
    """Builder for assertions configured with a single ``Bound``."""

    def __init__(self, factory: Callable[..., Assertion], *args: Any, **kwargs: Any):
        super().__init__(factory, *args, **kwargs)
        self._bound = Bound.UNSET

    @property
    def bound(self) -> Bound:
        return self._bound

    def exactly(self, value: int) -> BoundedBuilder:
        """Assert the measured value equals (=) a value."""
        return self._set_bound(BoundKind.EXACTLY, value)

    def less_than(self, value: int) -> BoundedBuilder:
        """Assert the measured value is less than (<) a value."""
        return self._set_bound(BoundKind.LESS_THAN, value)

    def at_most(self, value: int) -> BoundedBuilder:
        """Assert the measured value is at most (<=) a value."""
        return self._set_bound(BoundKind.AT_MOST, value)

    def at_least(self, value: int) -> BoundedBuilder:
        """Assert the measured value is at least (>=) a value."""
        return self._set_bound(BoundKind.AT_LEAST, value)

    def greater_than(self, value: int) -> BoundedBuilder:
        """Assert the measured value is greater than (>) a value."""
        return self._set_bound(BoundKind.GREATER_THAN, value)

    def options(self) -> dict[str, Any]:
        return {"bound": self._bound}

    def _set_bound(self, kind: BoundKind, value: int) -> BoundedBuilder:
        self._ensure_open()
        if self._bound.is_set:
            raise ConfigurationError(
                f"Cannot set bound '{kind.value}', bound '{self._bound}' is already set",
                context={"existing": self._bound.kind.value, "requested": kind.value},
            )
        self._bound = Bound(kind, value)
        return self
