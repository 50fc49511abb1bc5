"""Reusable assertions and the builders that attach them to fields."""

from .base import Assertion, AssertionBuilder, PredicateAssertion, ReadyBuilder
from .bounds import Bound, BoundedBuilder, BoundKind
from .checked import CheckedStateAssertion
from .number import NumberAssertion
from .text import (
    ContainsAssertion,
    ContainsBuilder,
    EmailAssertion,
    LengthAssertion,
    NotEmptyAssertion,
    RegexAssertion,
    UriAssertion,
    UriBuilder,
    UrlAssertion,
)

__all__ = [
    # Base types
    "Assertion",
    "AssertionBuilder",
    "ReadyBuilder",
    "PredicateAssertion",
    # Bounds
    "Bound",
    "BoundKind",
    "BoundedBuilder",
    # Text
    "NotEmptyAssertion",
    "LengthAssertion",
    "ContainsAssertion",
    "ContainsBuilder",
    "RegexAssertion",
    "EmailAssertion",
    "UrlAssertion",
    "UriAssertion",
    "UriBuilder",
    # Number
    "NumberAssertion",
    # Checked state
    "CheckedStateAssertion",
]
