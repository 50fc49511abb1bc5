"""Pytest configuration for dataknobs_forms tests."""

import sys
from pathlib import Path

import pytest

# Add the package source to path for testing
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from dataknobs_forms import InMemoryContainer  # noqa: E402
from dataknobs_forms.assertions import Assertion  # noqa: E402


class SpyAssertion(Assertion):
    """Assertion recording every value it is asked to check."""

    def __init__(self, result: bool = True, message: str = "spy failed"):
        self.result = result
        self.message = message
        self.calls: list = []

    def is_valid(self, value):
        self.calls.append(value)
        return self.result

    def description(self):
        return self.message


@pytest.fixture
def container():
    """Container with a few typical form inputs."""
    return InMemoryContainer({
        "email": "a@b.com",
        "name": "Ada",
        "age": "42",
        "subscribe": False,
        "website": "https://example.com",
    })


@pytest.fixture
def spy_factory():
    """Factory creating fresh spy assertions."""
    return SpyAssertion
