"""Conditions gating whether a field or assertion takes part in a pass.

A condition is a named, side-effect free predicate over a ``FormState``
snapshot. Conditions are evaluated fresh on every pass and never cached,
since the external state they look at may change between passes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, TYPE_CHECKING

from .exceptions import NotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from .result import FieldError


class FormState:
    """Snapshot of a validation pass as seen by conditions.

    Attributes:
        evaluated: Field ids evaluated earlier in this pass, mapped to the
            error each produced (``None`` when the field passed or was
            skipped)
        context: External state supplied by the caller of the pass
    """

    def __init__(
        self,
        evaluated: Mapping[str, FieldError | None] | None = None,
        context: Mapping[str, Any] | None = None,
        reader: Callable[[str], Any] | None = None,
    ):
        """Initialize the snapshot.

        Args:
            evaluated: Results of fields already evaluated this pass
            context: External state for conditions
            reader: Callable reading a field's current value by id
        """
        self.evaluated: Mapping[str, FieldError | None] = MappingProxyType(dict(evaluated or {}))
        self.context: Mapping[str, Any] = MappingProxyType(dict(context or {}))
        self._reader = reader

    def was_evaluated(self, field_id: str) -> bool:
        return field_id in self.evaluated

    def is_valid(self, field_id: str) -> bool | None:
        """Whether a field passed earlier in this pass.

        Returns:
            True or False for evaluated fields, None when the field has not
            been evaluated yet
        """
        if field_id not in self.evaluated:
            return None
        return self.evaluated[field_id] is None

    def value(self, field_id: str) -> Any:
        """Read the current value of a field, or of a container value the form can locate.

        Raises:
            NotFoundError: If no field reader is available or the id is unknown
        """
        if self._reader is None:
            raise NotFoundError(
                f"Cannot read field '{field_id}' without a form",
                context={"field_id": field_id},
            )
        return self._reader(field_id)


class Condition(ABC):
    """Base class for conditions with composable operators."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def evaluate(self, state: FormState) -> bool:
        """Decide whether the gated field or assertion applies this pass.

        Args:
            state: Snapshot of the current pass

        Returns:
            True if the gated item should be evaluated
        """
        pass

    def __call__(self, state: FormState) -> bool:
        return self.evaluate(state)

    def __and__(self, other: Condition) -> All:
        """Combine with AND: both conditions must hold."""
        if isinstance(self, All):
            return All(self.conditions + [other])
        elif isinstance(other, All):
            return All([self] + other.conditions)
        return All([self, other])

    def __or__(self, other: Condition) -> AnyOf:
        """Combine with OR: at least one condition must hold."""
        if isinstance(self, AnyOf):
            return AnyOf(self.conditions + [other])
        elif isinstance(other, AnyOf):
            return AnyOf([self] + other.conditions)
        return AnyOf([self, other])

    def __invert__(self) -> Not:
        """Negate this condition."""
        return Not(self)

    def __repr__(self) -> str:
        return f"<Condition {self.name}>"


class All(Condition):
    """All conditions must hold (AND logic), short-circuiting on the first failure."""

    def __init__(self, conditions: list[Condition]):
        self.conditions = conditions

    @property
    def name(self) -> str:
        return " and ".join(c.name for c in self.conditions)

    def evaluate(self, state: FormState) -> bool:
        return all(condition.evaluate(state) for condition in self.conditions)


class AnyOf(Condition):
    """At least one condition must hold (OR logic)."""

    def __init__(self, conditions: list[Condition]):
        self.conditions = conditions

    @property
    def name(self) -> str:
        return " or ".join(c.name for c in self.conditions)

    def evaluate(self, state: FormState) -> bool:
        return any(condition.evaluate(state) for condition in self.conditions)


class Not(Condition):
    """Negates a condition."""

    def __init__(self, condition: Condition):
        self.condition = condition

    @property
    def name(self) -> str:
        return f"not {self.condition.name}"

    def evaluate(self, state: FormState) -> bool:
        return not self.condition.evaluate(state)


class Predicate(Condition):
    """Condition backed by a named callable taking the form state."""

    def __init__(self, name: str, predicate: Callable[[FormState], Any]):
        """Initialize the condition.

        Args:
            name: Name used in logs and reprs
            predicate: Callable receiving the ``FormState``
        """
        self._name = name
        self.predicate = predicate

    @property
    def name(self) -> str:
        return self._name

    def evaluate(self, state: FormState) -> bool:
        return bool(self.predicate(state))


class FieldValid(Condition):
    """Holds when another field was evaluated earlier in this pass and passed.

    A field that has not been evaluated yet (registered later, or a single
    field revalidation) does not satisfy this condition.
    """

    def __init__(self, field_id: str):
        self.field_id = field_id

    @property
    def name(self) -> str:
        return f"valid({self.field_id})"

    def evaluate(self, state: FormState) -> bool:
        return state.is_valid(self.field_id) is True


class ValueEquals(Condition):
    """Holds when another field's current value equals an expected value."""

    def __init__(self, field_id: str, expected: Any):
        self.field_id = field_id
        self.expected = expected

    @property
    def name(self) -> str:
        return f"{self.field_id} == {self.expected!r}"

    def evaluate(self, state: FormState) -> bool:
        return state.value(self.field_id) == self.expected


class ContextFlag(Condition):
    """Holds when the external context carries a truthy value for a key."""

    def __init__(self, key: str):
        self.key = key

    @property
    def name(self) -> str:
        return f"context[{self.key}]"

    def evaluate(self, state: FormState) -> bool:
        return bool(state.context.get(self.key))


def as_condition(condition: Condition | Callable[[FormState], Any]) -> Condition:
    """Coerce a plain callable into a named ``Predicate`` condition.

    Raises:
        TypeError: If the argument is neither a condition nor callable
    """
    if isinstance(condition, Condition):
        return condition
    if callable(condition):
        return Predicate(getattr(condition, "__name__", "predicate"), condition)
    raise TypeError(f"Expected a Condition or callable, got {type(condition).__name__}")
