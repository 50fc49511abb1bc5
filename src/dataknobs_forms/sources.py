"""Value sources and containers backing form fields.

The engine never talks to a UI toolkit. A field reads its value through a
zero-argument accessor, usually ``ValueSource.read`` of a source found by
a ``Container`` when the field is registered. Glue code for a toolkit
implements these protocols around its widgets; the in-memory versions
here serve plain Python callers and tests.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, TYPE_CHECKING, runtime_checkable

from .exceptions import NotFoundError, UnavailableSourceError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

logger = logging.getLogger(__name__)


@runtime_checkable
class ValueSource(Protocol):
    """Something a field can read its current value from."""

    def read(self) -> Any:
        """Return the current value.

        Raises:
            UnavailableSourceError: If the backing object no longer exists
        """
        ...


@runtime_checkable
class ChangeNotifier(Protocol):
    """Something that reports value changes to subscribers."""

    def subscribe(self, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Register a change callback.

        Returns:
            Callable that removes the callback again
        """
        ...


@runtime_checkable
class Container(Protocol):
    """Resolves identifiers to the sources backing fields."""

    def locate(self, identifier: str) -> ValueSource | None:
        """Find the source for an identifier, or None if there is none."""
        ...


class InMemorySource:
    """A mutable value holder that notifies subscribers on change.

    Example:
        ```python
        source = InMemorySource("")
        unsubscribe = source.subscribe(lambda value: print(value))
        source.set("hello")   # prints "hello"
        unsubscribe()
        ```
    """

    def __init__(self, value: Any = None, name: str | None = None):
        self._value = value
        self._name = name
        self._detached = False
        self._listeners: list[Callable[[Any], None]] = []

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def detached(self) -> bool:
        return self._detached

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def read(self) -> Any:
        self._ensure_attached()
        return self._value

    def set(self, value: Any) -> None:
        """Replace the value and notify subscribers."""
        self._ensure_attached()
        self._value = value
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                logger.exception("Error in change listener for source %s", self._name)

    def subscribe(self, callback: Callable[[Any], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def detach(self) -> None:
        """Mark the backing object as gone; reads fail from now on."""
        self._detached = True
        self._listeners.clear()

    def _ensure_attached(self) -> None:
        if self._detached:
            raise UnavailableSourceError(
                f"Source '{self._name}' is no longer available",
                context={"source": self._name},
            )

    def __repr__(self) -> str:
        return f"InMemorySource(name={self._name!r}, detached={self._detached})"


class InMemoryContainer:
    """Dict-backed container of ``InMemorySource`` objects."""

    def __init__(self, values: Mapping[str, Any] | None = None):
        """Initialize the container.

        Args:
            values: Initial values keyed by identifier
        """
        self._sources: dict[str, InMemorySource] = {}
        for identifier, value in (values or {}).items():
            self.add(identifier, value)

    def add(self, identifier: str, value: Any = None) -> InMemorySource:
        """Create (or replace) the source for an identifier."""
        source = InMemorySource(value, name=identifier)
        self._sources[identifier] = source
        return source

    def locate(self, identifier: str) -> InMemorySource | None:
        return self._sources.get(identifier)

    def source(self, identifier: str) -> InMemorySource:
        """Get the source for an identifier.

        Raises:
            NotFoundError: If the identifier is unknown
        """
        source = self.locate(identifier)
        if source is None:
            raise NotFoundError(
                f"No source for '{identifier}'",
                context={"identifier": identifier, "available": list(self._sources)},
            )
        return source

    def set(self, identifier: str, value: Any) -> None:
        """Set the value of an existing source."""
        self.source(identifier).set(value)

    def detach(self) -> None:
        """Detach every source, as when the backing view goes away."""
        for source in self._sources.values():
            source.detach()

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._sources

    def __iter__(self) -> Iterator[str]:
        return iter(self._sources)

    def __len__(self) -> int:
        return len(self._sources)
