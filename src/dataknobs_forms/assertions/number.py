"""Numeric assertion.
"""

from __future__ import annotations

import re
from typing import Any

from .base import Assertion, AssertionBuilder
from .bounds import Bound, BoundedBuilder, BoundKind

_NUMBER_DESCRIPTIONS = {
    BoundKind.EXACTLY: "must equal {}",
    BoundKind.LESS_THAN: "must be less than {}",
    BoundKind.AT_MOST: "must be at most {}",
    BoundKind.AT_LEAST: "must be at least {}",
    BoundKind.GREATER_THAN: "must be greater than {}",
}

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+", re.ASCII)


def parse_int(value: Any) -> int | None:
    """Parse a value as an integer, returning None when it is not one.

    Text must be a signed ASCII decimal with nothing around it.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value)
    if not _INTEGER_PATTERN.fullmatch(text):
        return None
    return int(text)


class NumberAssertion(Assertion):
    """The value must be an integer satisfying a bound.

    Text is parsed as a base-10 integer. Anything that does not parse
    fails with the bound's description. Without a bound the assertion
    always fails.
    """

    def __init__(self, bound: Bound = Bound.UNSET):
        self.bound = bound

    def is_valid(self, value: Any) -> bool:
        number = parse_int(value)
        if number is None:
            return False
        return self.bound.satisfied_by(number)

    def description(self) -> str:
        template = _NUMBER_DESCRIPTIONS.get(self.bound.kind)
        if template is None:
            return "no bound set"
        return template.format(self.bound.value)

    @classmethod
    def builder(cls, *args: Any, **kwargs: Any) -> AssertionBuilder:
        return BoundedBuilder(cls, *args, **kwargs)

    def __repr__(self) -> str:
        return f"NumberAssertion({self.bound})"
