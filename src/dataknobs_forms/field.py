"""Fields and the builder used to configure them.
"""

from __future__ import annotations

import logging
from typing import Any, TYPE_CHECKING

from .assertions import (
    Assertion,
    AssertionBuilder,
    CheckedStateAssertion,
    ContainsAssertion,
    EmailAssertion,
    LengthAssertion,
    NotEmptyAssertion,
    NumberAssertion,
    PredicateAssertion,
    ReadyBuilder,
    RegexAssertion,
    UriAssertion,
    UrlAssertion,
)
from .conditions import as_condition
from .exceptions import ConfigurationError
from .result import FieldError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from re import Pattern as RegexPattern

    from .assertions import BoundedBuilder, ContainsBuilder, UriBuilder
    from .conditions import Condition, FormState

logger = logging.getLogger(__name__)


class Field:
    """A named value slot with its ordered assertions and gating conditions.

    Fields are created by ``FieldBuilder.build()`` when their form is
    frozen and do not change afterwards. The value itself is re-read from
    the accessor on every evaluation.
    """

    def __init__(
        self,
        field_id: str,
        accessor: Callable[[], Any],
        assertions: Sequence[tuple[Assertion, Condition | None]] = (),
        conditions: Sequence[Condition] = (),
        label: str | None = None,
    ):
        """Initialize a field.

        Args:
            field_id: Identifier, unique within the owning form
            accessor: Zero-argument callable returning the current value
            assertions: Assertions in evaluation order, each with an optional gate
            conditions: Conditions that must all hold for the field to apply
            label: Optional display label carried on errors
        """
        self.id = field_id
        self.accessor = accessor
        self.label = label
        self._entries = tuple(assertions)
        self.conditions: tuple[Condition, ...] = tuple(conditions)

    @property
    def assertions(self) -> tuple[Assertion, ...]:
        return tuple(assertion for assertion, _ in self._entries)

    def read(self) -> Any:
        """Read the field's current value."""
        return self.accessor()

    def is_applicable(self, state: FormState) -> bool:
        """Check the field's conditions, stopping at the first that fails."""
        for condition in self.conditions:
            if not condition.evaluate(state):
                logger.debug("Field %s skipped: condition %s is false", self.id, condition.name)
                return False
        return True

    def validate(self, state: FormState) -> FieldError | None:
        """Evaluate the field.

        The first failing assertion wins: its description becomes the
        field's error and later assertions are not evaluated.

        Args:
            state: Snapshot of the current pass, consulted by conditions

        Returns:
            The field's error, or None when it passes or does not apply
        """
        if not self.is_applicable(state):
            return None

        value = self.read()
        for assertion, condition in self._entries:
            if condition is not None and not condition.evaluate(state):
                continue
            if not assertion.check(value):
                return FieldError(self.id, assertion.description(), self.label)
        return None

    def __repr__(self) -> str:
        return f"Field(id={self.id!r}, assertions={len(self._entries)}, conditions={len(self.conditions)})"


class FieldBuilder:
    """Fluent configuration surface for one field.

    Example:
        ```python
        field = form.field("password")
        field.is_not_empty()
        field.length().at_least(8)
        field.matches(r".*\\d.*", "must contain a digit")
        ```
    """

    def __init__(self, field_id: str, accessor: Callable[[], Any], label: str | None = None):
        self._id = field_id
        self._accessor = accessor
        self._label = label
        self._builders: list[AssertionBuilder] = []
        self._conditions: list[Condition] = []
        self._field: Field | None = None

    @property
    def id(self) -> str:
        return self._id

    @property
    def frozen(self) -> bool:
        return self._field is not None

    @property
    def builders(self) -> tuple[AssertionBuilder, ...]:
        return tuple(self._builders)

    def assert_that(self, factory: Any, *args: Any, **kwargs: Any) -> AssertionBuilder:
        """Attach an assertion and return its configuration handle.

        Args:
            factory: An ``Assertion`` class (its ``builder()`` is used), an
                assertion instance, an ``AssertionBuilder``, or a callable
                returning an assertion or builder
            *args: Arguments for the factory
            **kwargs: Keyword arguments for the factory

        Returns:
            The builder for further per-assertion configuration

        Raises:
            ConfigurationError: If the field is frozen or the factory
                produces something that is not an assertion
        """
        self._ensure_open()
        builder = self._to_builder(factory, *args, **kwargs)
        self._builders.append(builder)
        return builder

    def conditional(self, condition: Condition | Callable[[FormState], Any]) -> FieldBuilder:
        """Only evaluate this field while the condition holds.

        Multiple conditions combine with AND, in registration order.

        Returns:
            Self for chaining
        """
        self._ensure_open()
        self._conditions.append(as_condition(condition))
        return self

    def is_not_empty(self) -> AssertionBuilder:
        return self.assert_that(NotEmptyAssertion)

    def length(self) -> BoundedBuilder:
        return self.assert_that(LengthAssertion)  # type: ignore[return-value]

    def is_number(self) -> BoundedBuilder:
        return self.assert_that(NumberAssertion)  # type: ignore[return-value]

    def contains(self, text: str) -> ContainsBuilder:
        return self.assert_that(ContainsAssertion, text)  # type: ignore[return-value]

    def matches(self, pattern: str | RegexPattern, description: str) -> AssertionBuilder:
        return self.assert_that(RegexAssertion, pattern, description)

    def is_email(self) -> AssertionBuilder:
        return self.assert_that(EmailAssertion)

    def is_url(self) -> AssertionBuilder:
        return self.assert_that(UrlAssertion)

    def is_uri(self) -> UriBuilder:
        return self.assert_that(UriAssertion)  # type: ignore[return-value]

    def is_checked(self) -> AssertionBuilder:
        return self.assert_that(CheckedStateAssertion, True)

    def is_not_checked(self) -> AssertionBuilder:
        return self.assert_that(CheckedStateAssertion, False)

    def that(self, predicate: Callable[[Any], Any], description: str | None = None) -> AssertionBuilder:
        """Attach an arbitrary predicate over the value."""
        return self.assert_that(PredicateAssertion, predicate, description)

    def build(self) -> Field:
        """Build the field and freeze this builder and its assertion builders."""
        if self._field is None:
            self._field = Field(
                self._id,
                self._accessor,
                assertions=[(builder.build(), builder.condition) for builder in self._builders],
                conditions=self._conditions,
                label=self._label,
            )
        return self._field

    def _to_builder(self, factory: Any, *args: Any, **kwargs: Any) -> AssertionBuilder:
        if isinstance(factory, AssertionBuilder):
            builder = factory
        elif isinstance(factory, Assertion):
            builder = ReadyBuilder(factory)
        elif isinstance(factory, type) and issubclass(factory, Assertion):
            builder = factory.builder(*args, **kwargs)
        elif callable(factory):
            made = factory(*args, **kwargs)
            if isinstance(made, AssertionBuilder):
                builder = made
            elif isinstance(made, Assertion):
                builder = ReadyBuilder(made)
            else:
                raise ConfigurationError(
                    f"Factory for field '{self._id}' returned {type(made).__name__}, not an assertion",
                    context={"field_id": self._id},
                )
        else:
            raise ConfigurationError(
                f"Cannot attach {factory!r} to field '{self._id}'",
                context={"field_id": self._id},
            )

        builder.attach(self._id)
        return builder

    def _ensure_open(self) -> None:
        if self.frozen:
            raise ConfigurationError(
                f"Field '{self._id}' is frozen",
                context={"field_id": self._id},
            )
