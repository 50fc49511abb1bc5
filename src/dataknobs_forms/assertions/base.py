"""Assertion and assertion-builder base classes.

An assertion is a predicate over a field's value paired with the sentence
to show when the predicate fails. Assertions are configured through an
``AssertionBuilder`` while the form is being defined, then built into
objects that are no longer changed by configuration.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, TYPE_CHECKING

from ..conditions import as_condition
from ..exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..conditions import Condition, FormState

logger = logging.getLogger(__name__)


class Assertion(ABC):
    """Base class for all assertions."""

    #: Sentence reported when no more specific failure is known.
    default_description = "is invalid"

    @abstractmethod
    def is_valid(self, value: Any) -> bool:
        """Check a value.

        Args:
            value: The field's current value

        Returns:
            True if the value satisfies this assertion
        """
        pass

    def description(self) -> str:
        """Describe the most recent failure of this assertion."""
        return self.default_description

    def check(self, value: Any) -> bool:
        """Evaluate the assertion, treating any internal fault as a failure."""
        try:
            return bool(self.is_valid(value))
        except Exception as e:
            logger.debug(
                "Assertion %s raised %s, treating as failure",
                type(self).__name__,
                e,
            )
            return False

    @classmethod
    def builder(cls, *args: Any, **kwargs: Any) -> AssertionBuilder:
        """Create the builder used to attach this assertion to a field."""
        return AssertionBuilder(cls, *args, **kwargs)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class AssertionBuilder:
    """Configuration handle for one assertion attachment.

    Subclasses add family specific options (bounds, case handling, ...)
    and return ``self`` from each option so calls can be chained. Once
    ``build()`` has been called the builder is frozen and any further
    configuration raises ``ConfigurationError``.
    """

    def __init__(self, factory: Callable[..., Assertion], *args: Any, **kwargs: Any):
        """Initialize the builder.

        Args:
            factory: Callable creating the assertion
            *args: Positional arguments passed to the factory
            **kwargs: Keyword arguments passed to the factory
        """
        self._factory = factory
        self._args = args
        self._kwargs = kwargs
        self._condition: Condition | None = None
        self._built: Assertion | None = None
        self._owner: str | None = None

    @property
    def frozen(self) -> bool:
        return self._built is not None

    @property
    def owner(self) -> str | None:
        """Id of the field this assertion is attached to."""
        return self._owner

    def attach(self, field_id: str) -> None:
        """Record the field this builder belongs to.

        Raises:
            ConfigurationError: If the builder is already attached or frozen
        """
        if self._owner is not None or self.frozen:
            raise ConfigurationError(
                f"Assertion is already attached to field '{self._owner}'",
                context={"field_id": field_id, "owner": self._owner},
            )
        self._owner = field_id

    @property
    def condition(self) -> Condition | None:
        """The condition gating this assertion, if any."""
        return self._condition

    def when(self, condition: Condition | Callable[[FormState], Any]) -> AssertionBuilder:
        """Only evaluate this assertion while the condition holds.

        Args:
            condition: Gate evaluated against the form state on every pass

        Returns:
            Self for chaining
        """
        self._ensure_open()
        condition = as_condition(condition)
        if self._condition is not None:
            condition = self._condition & condition
        self._condition = condition
        return self

    def options(self) -> dict[str, Any]:
        """Keyword arguments contributed by builder options."""
        return {}

    def build(self) -> Assertion:
        """Create the assertion and freeze this builder.

        Returns:
            The configured assertion (the same instance on repeated calls)
        """
        if self._built is None:
            self._built = self._factory(*self._args, **self._kwargs, **self.options())
        return self._built

    def _ensure_open(self) -> None:
        if self.frozen:
            raise ConfigurationError(
                "Assertion is already attached to a frozen form",
                context={"assertion": repr(self._built)},
            )


class ReadyBuilder(AssertionBuilder):
    """Builder wrapping an assertion instance created by the caller."""

    def __init__(self, assertion: Assertion):
        super().__init__(lambda: assertion)


class PredicateAssertion(Assertion):
    """Assertion backed by a caller supplied callable."""

    default_description = "didn't pass custom validation"

    def __init__(self, predicate: Callable[[Any], Any], description: str | None = None):
        """Initialize with a predicate.

        Args:
            predicate: Callable receiving the value and returning a truthy result
            description: Message reported when the predicate fails
        """
        self.predicate = predicate
        self._description = description

    def is_valid(self, value: Any) -> bool:
        return bool(self.predicate(value))

    def description(self) -> str:
        return self._description or self.default_description
