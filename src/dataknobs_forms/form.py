"""Forms: ordered collections of fields and the validation pass over them.
"""

from __future__ import annotations

import logging
from typing import Any, TYPE_CHECKING

from .conditions import FormState
from .exceptions import ConfigurationError, NotFoundError
from .field import Field, FieldBuilder
from .live import LiveValidation, Subscription
from .result import ValidationResult
from .sources import ChangeNotifier

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

    from .result import FieldError
    from .sources import Container, ValueSource

logger = logging.getLogger(__name__)


class Form:
    """An ordered set of fields validated together.

    Fields are registered with ``field()`` while the form is open. The form
    is frozen by ``build_form()``, by an explicit ``freeze()`` or by its
    first evaluation; after that no fields can be added and no assertion
    can be reconfigured. Field values are read again on every pass.

    Calls are synchronous and unsynchronized: confine a form to one thread
    (for example a UI thread) or serialize access externally.

    Example:
        ```python
        form = Form(container)
        form.field("email").is_email()
        form.field("age").is_number().at_least(18)

        result = form.validate()
        if not result:
            for error in result.errors:
                print(error.field_id, error.message)
        ```
    """

    def __init__(self, container: Container | None = None, name: str | None = None):
        """Initialize an empty form.

        Args:
            container: Resolves field ids to value sources at registration
            name: Optional name used in logs
        """
        self.container = container
        self.name = name or "form"
        self._builders: dict[str, FieldBuilder] = {}
        self._sources: dict[str, ValueSource] = {}
        self._fields: dict[str, Field] | None = None
        self._live = LiveValidation(self)

    # -- definition -------------------------------------------------------

    def field(
        self,
        field_id: str,
        accessor: Callable[[], Any] | None = None,
        label: str | None = None,
    ) -> FieldBuilder:
        """Register a field.

        Args:
            field_id: Identifier, unique within this form
            accessor: Zero-argument callable returning the field's value;
                when omitted the form's container locates a source for the id
            label: Optional display label carried on errors

        Returns:
            FieldBuilder for attaching assertions and conditions

        Raises:
            ConfigurationError: If the form is frozen, the id is taken, or
                there is neither an accessor nor a container
            NotFoundError: If the container has no source for the id
        """
        if self.frozen:
            raise ConfigurationError(
                f"Cannot add field '{field_id}': form '{self.name}' is frozen",
                context={"field_id": field_id, "form": self.name},
            )
        if field_id in self._builders:
            raise ConfigurationError(
                f"Field '{field_id}' is already registered in form '{self.name}'",
                context={"field_id": field_id, "form": self.name},
            )

        if accessor is None:
            source = self._locate(field_id)
            self._sources[field_id] = source
            accessor = source.read

        builder = FieldBuilder(field_id, accessor, label=label)
        self._builders[field_id] = builder
        return builder

    def freeze(self) -> Form:
        """Build every field; the form's structure is fixed from now on.

        Returns:
            Self for chaining
        """
        if self._fields is not None:
            return self

        fields = {field_id: builder.build() for field_id, builder in self._builders.items()}

        seen: dict[int, str] = {}
        for field in fields.values():
            for assertion in field.assertions:
                owner = seen.setdefault(id(assertion), field.id)
                if owner != field.id or field.assertions.count(assertion) > 1:
                    raise ConfigurationError(
                        f"Assertion {assertion!r} is attached more than once",
                        context={"fields": sorted({owner, field.id})},
                    )

        self._fields = fields
        logger.debug("Form %s frozen with %d field(s)", self.name, len(fields))
        return self

    @property
    def frozen(self) -> bool:
        return self._fields is not None

    @property
    def fields(self) -> tuple[Field, ...]:
        """Fields in registration order (freezes the form)."""
        return tuple(self._frozen_fields().values())

    @property
    def field_ids(self) -> list[str]:
        return list(self._builders)

    def get_field(self, field_id: str) -> Field:
        """Get a registered field (freezes the form).

        Raises:
            NotFoundError: If the id was never registered
        """
        fields = self._frozen_fields()
        if field_id not in fields:
            raise NotFoundError(
                f"Field not found: {field_id}",
                context={"field_id": field_id, "form": self.name, "available_keys": list(fields)},
            )
        return fields[field_id]

    def source(self, field_id: str) -> ValueSource | None:
        """The container source bound to a field, if it was located through one."""
        return self._sources.get(field_id)

    # -- evaluation -------------------------------------------------------

    def validate(self, context: Mapping[str, Any] | None = None) -> ValidationResult:
        """Run a validation pass over every field in registration order.

        Args:
            context: External state handed to conditions

        Returns:
            ValidationResult with at most one error per field

        Raises:
            UnavailableSourceError: If a field's source has gone away
        """
        fields = self._frozen_fields()
        logger.debug("Validating form %s (%d field(s))", self.name, len(fields))

        evaluated: dict[str, FieldError | None] = {}
        errors: list[FieldError] = []
        for field_id, field in fields.items():
            state = FormState(evaluated, context, reader=self._read)
            error = field.validate(state)
            evaluated[field_id] = error
            if error is not None:
                errors.append(error)

        result = ValidationResult.from_errors(errors)
        logger.debug(
            "Form %s %s with %d error(s)",
            self.name,
            "passed" if result.success else "failed",
            len(result.errors),
        )
        return result

    def validate_field(
        self,
        field_id: str,
        context: Mapping[str, Any] | None = None,
    ) -> FieldError | None:
        """Revalidate a single field without touching the others.

        Conditions see no results from other fields in this mode.

        Args:
            field_id: Registered field id
            context: External state handed to conditions

        Returns:
            The field's error, or None when it passes or does not apply

        Raises:
            NotFoundError: If the id was never registered
        """
        field = self.get_field(field_id)
        return field.validate(FormState(None, context, reader=self._read))

    # -- live mode --------------------------------------------------------

    def live(
        self,
        field_id: str,
        on_result: Callable[[str, FieldError | None], None],
        source: ChangeNotifier | None = None,
        immediate: bool = False,
    ) -> Subscription:
        """Revalidate a field each time its value changes.

        Args:
            field_id: Registered field id
            on_result: Called with the field id and its error after each change
            source: Change notifier; defaults to the field's container source
            immediate: Also revalidate once right away

        Returns:
            Subscription handle; cancel it to stop

        Raises:
            NotFoundError: If the id was never registered
            ConfigurationError: If no change notifier is available
        """
        self.get_field(field_id)
        notifier = source if source is not None else self._sources.get(field_id)
        if not isinstance(notifier, ChangeNotifier):
            raise ConfigurationError(
                f"Field '{field_id}' has no change notifier for live validation",
                context={"field_id": field_id},
            )
        return self._live.start(field_id, notifier, on_result, immediate=immediate)

    def stop_live(self, field_id: str) -> bool:
        """Stop live revalidation of a field.

        Returns:
            True if a subscription was cancelled
        """
        return self._live.stop(field_id)

    @property
    def live_subscriptions(self) -> dict[str, Subscription]:
        return self._live.subscriptions

    def close(self) -> None:
        """Cancel all live subscriptions."""
        self._live.close()

    def __enter__(self) -> Form:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -- helpers ----------------------------------------------------------

    def _frozen_fields(self) -> dict[str, Field]:
        if self._fields is None:
            self.freeze()
        return self._fields  # type: ignore[return-value]

    def _read(self, field_id: str) -> Any:
        # Conditions may name container values that are not fields themselves
        fields = self._frozen_fields()
        if field_id in fields:
            return fields[field_id].read()
        if self.container is not None:
            source = self.container.locate(field_id)
            if source is not None:
                return source.read()
        raise NotFoundError(
            f"No field or container value named '{field_id}'",
            context={"field_id": field_id, "form": self.name, "available_keys": list(fields)},
        )

    def _locate(self, field_id: str) -> ValueSource:
        if self.container is None:
            raise ConfigurationError(
                f"Field '{field_id}' needs an accessor or a form container",
                context={"field_id": field_id, "form": self.name},
            )
        source = self.container.locate(field_id)
        if source is None:
            raise NotFoundError(
                f"Container has no source for field '{field_id}'",
                context={"field_id": field_id, "form": self.name},
            )
        return source

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._builders

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self._builders)

    def __repr__(self) -> str:
        return f"Form(name={self.name!r}, fields={self.field_ids}, frozen={self.frozen})"


def build_form(
    configure: Callable[[Form], Any],
    container: Container | None = None,
    name: str | None = None,
) -> Form:
    """Create a form, let ``configure`` register its fields, then freeze it.

    Example:
        ```python
        def signup(form):
            form.field("email").is_email()
            form.field("password").length().at_least(8)

        form = build_form(signup, container)
        ```
    """
    form = Form(container, name=name)
    configure(form)
    return form.freeze()
