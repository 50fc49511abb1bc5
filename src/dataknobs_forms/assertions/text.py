"""Assertions over text values.

Every assertion here reads the value as text: ``None`` becomes the empty
string and anything else goes through ``str()``.
"""

from __future__ import annotations

import re
from re import Pattern as RegexPattern
from typing import Any, TYPE_CHECKING
from urllib.parse import SplitResult, urlsplit

from .base import Assertion, AssertionBuilder
from .bounds import Bound, BoundedBuilder, BoundKind

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9+._%\-]{1,256}"
    r"@"
    r"[a-zA-Z0-9][a-zA-Z0-9\-]{0,64}"
    r"(\.[a-zA-Z0-9][a-zA-Z0-9\-]{0,25})+"
)

WEB_URL_PATTERN = re.compile(
    r"((https?|ftp)://)?"
    r"([a-zA-Z0-9._%+\-]+(:[^@\s]*)?@)?"
    r"(localhost|(\d{1,3}\.){3}\d{1,3}|([a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,63})"
    r"(:\d{1,5})?"
    r"([/?#][^\s]*)?",
    re.IGNORECASE,
)

_LENGTH_DESCRIPTIONS = {
    BoundKind.EXACTLY: "length must be exactly {}",
    BoundKind.LESS_THAN: "length must be less than {}",
    BoundKind.AT_MOST: "length must be at most {}",
    BoundKind.AT_LEAST: "length must be at least {}",
    BoundKind.GREATER_THAN: "length must be greater than {}",
}


def as_text(value: Any) -> str:
    """Read a field value as text."""
    return "" if value is None else str(value)


class NotEmptyAssertion(Assertion):
    """The text must not be empty."""

    default_description = "cannot be empty"

    def is_valid(self, value: Any) -> bool:
        return len(as_text(value)) > 0


class LengthAssertion(Assertion):
    """The text length must satisfy a bound.

    Without a bound the assertion always fails.
    """

    def __init__(self, bound: Bound = Bound.UNSET):
        self.bound = bound

    def is_valid(self, value: Any) -> bool:
        return self.bound.satisfied_by(len(as_text(value)))

    def description(self) -> str:
        template = _LENGTH_DESCRIPTIONS.get(self.bound.kind)
        if template is None:
            return "no bound set"
        return template.format(self.bound.value)

    @classmethod
    def builder(cls, *args: Any, **kwargs: Any) -> AssertionBuilder:
        return BoundedBuilder(cls, *args, **kwargs)

    def __repr__(self) -> str:
        return f"LengthAssertion({self.bound})"


class ContainsAssertion(Assertion):
    """The text must contain a substring."""

    def __init__(self, text: str, ignore_case: bool = False):
        self.text = text
        self.ignore_case = ignore_case

    def is_valid(self, value: Any) -> bool:
        if self.ignore_case:
            return self.text.casefold() in as_text(value).casefold()
        return self.text in as_text(value)

    def description(self) -> str:
        return f'must contain "{self.text}"'

    @classmethod
    def builder(cls, *args: Any, **kwargs: Any) -> AssertionBuilder:
        return ContainsBuilder(cls, *args, **kwargs)


class ContainsBuilder(AssertionBuilder):
    """Builder for ``ContainsAssertion``."""

    def __init__(self, factory: Callable[..., Assertion], *args: Any, **kwargs: Any):
        super().__init__(factory, *args, **kwargs)
        self._ignore_case = False

    def ignore_case(self) -> ContainsBuilder:
        """Case is ignored when checking if the input contains the text."""
        self._ensure_open()
        self._ignore_case = True
        return self

    def options(self) -> dict[str, Any]:
        return {"ignore_case": self._ignore_case} if self._ignore_case else {}


class RegexAssertion(Assertion):
    """The whole text must match a regular expression."""

    def __init__(self, pattern: str | RegexPattern, description: str):
        """Initialize with a pattern.

        Args:
            pattern: Regex pattern (string or compiled pattern)
            description: Message reported when the text does not match
        """
        self.regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        self._description = description

    def is_valid(self, value: Any) -> bool:
        return self.regex.fullmatch(as_text(value)) is not None

    def description(self) -> str:
        return self._description


class EmailAssertion(RegexAssertion):
    """The text must be an email address."""

    def __init__(self) -> None:
        super().__init__(EMAIL_PATTERN, "must be a valid email address")


class UrlAssertion(RegexAssertion):
    """The text must be a web URL."""

    def __init__(self) -> None:
        super().__init__(WEB_URL_PATTERN, "must be a valid URL")


def _display_list(items: Sequence[str]) -> str:
    return "[" + ", ".join(f"'{item}'" for item in items) + "]"


class UriAssertion(Assertion):
    """The text must parse as a URI, optionally with extra requirements.

    The description reflects whichever requirement failed last: the scheme
    whitelist, the custom predicate, or the parse itself.
    """

    default_description = "must be a valid Uri"

    def __init__(
        self,
        schemes: Sequence[str] = (),
        schemes_description: str | None = None,
        predicate: Callable[[SplitResult], bool] | None = None,
        predicate_description: str | None = None,
    ):
        self.schemes = tuple(schemes)
        self.schemes_description = schemes_description
        self.predicate = predicate
        self.predicate_description = predicate_description
        self._failure: str | None = None

    def is_valid(self, value: Any) -> bool:
        self._failure = None
        try:
            uri = urlsplit(as_text(value))
        except ValueError:
            return False

        if self.schemes and uri.scheme not in self.schemes:
            self._failure = self.schemes_description or (
                f"scheme '{uri.scheme}' not in {_display_list(self.schemes)}"
            )
            return False

        if self.predicate is not None:
            # Also the description when the predicate raises
            self._failure = self.predicate_description or "didn't pass custom validation"
            if not self.predicate(uri):
                return False

        self._failure = None
        return True

    def description(self) -> str:
        return self._failure or self.default_description

    @classmethod
    def builder(cls, *args: Any, **kwargs: Any) -> AssertionBuilder:
        return UriBuilder(cls, *args, **kwargs)


class UriBuilder(AssertionBuilder):
    """Builder for ``UriAssertion``."""

    def __init__(self, factory: Callable[..., Assertion], *args: Any, **kwargs: Any):
        super().__init__(factory, *args, **kwargs)
        self._options: dict[str, Any] = {}

    def has_scheme(self, description: str | None, schemes: Sequence[str]) -> UriBuilder:
        """Assert that the URI has a scheme within the given values."""
        self._ensure_open()
        self._options["schemes"] = tuple(schemes)
        self._options["schemes_description"] = description
        return self

    def that(self, description: str | None, predicate: Callable[[SplitResult], bool]) -> UriBuilder:
        """Make a custom assertion on the parsed URI."""
        self._ensure_open()
        self._options["predicate"] = predicate
        self._options["predicate_description"] = description
        return self

    def options(self) -> dict[str, Any]:
        return dict(self._options)
