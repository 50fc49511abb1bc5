"""Assertion over checkable values (checkboxes, switches, toggles).
"""

from __future__ import annotations

from typing import Any

from .base import Assertion


class CheckedStateAssertion(Assertion):
    """The value's truthiness must match the expected checked state."""

    def __init__(self, checked: bool = True):
        self.checked = checked

    def is_valid(self, value: Any) -> bool:
        return bool(value) == self.checked

    def description(self) -> str:
        return "should be checked" if self.checked else "should not be checked"

    def __repr__(self) -> str:
        return f"CheckedStateAssertion(checked={self.checked})"
