"""Build forms from configuration.

Configuration Options:
    name (str): Form name
    fields (list): List of field definitions

Field Definition Options:
    id (str): Field id, located through the container
    label (str): Optional display label
    when (dict): Optional gate, one of
        ``{field: <id>, equals: <value>}``, ``{valid: <id>}``, ``{context: <key>}``
    assertions (list): Assertion definitions, each with a ``type`` and options

Example Configuration:
    ```yaml
    name: signup
    fields:
      - id: email
        assertions:
          - type: not_empty
          - type: email
      - id: age
        when:
          field: show_age
          equals: true
        assertions:
          - type: number
            at_least: 18
    ```
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, TYPE_CHECKING

import yaml  # type: ignore[import-untyped]

from .assertions import (
    AssertionBuilder,
    BoundedBuilder,
    CheckedStateAssertion,
    ContainsAssertion,
    ContainsBuilder,
    EmailAssertion,
    LengthAssertion,
    NotEmptyAssertion,
    NumberAssertion,
    RegexAssertion,
    UriAssertion,
    UriBuilder,
    UrlAssertion,
)
from .conditions import Condition, ContextFlag, FieldValid, ValueEquals
from .exceptions import ConfigurationError, NotFoundError
from .form import Form

if TYPE_CHECKING:
    from collections.abc import Callable

    from .field import FieldBuilder
    from .sources import Container

logger = logging.getLogger(__name__)

BOUND_KEYS = ("exactly", "less_than", "at_most", "at_least", "greater_than")


class AssertionRegistry:
    """Registry of assertion factories keyed by configuration ``type``.

    Each factory receives the field builder and the assertion's config
    dict (without ``type``) and attaches the assertion, returning its
    builder.
    """

    def __init__(self, name: str = "assertions"):
        self._name = name
        self._items: dict[str, Callable[[FieldBuilder, dict[str, Any]], AssertionBuilder]] = {}
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return self._name

    def register(
        self,
        key: str,
        factory: Callable[[FieldBuilder, dict[str, Any]], AssertionBuilder],
        allow_overwrite: bool = False,
    ) -> None:
        """Register an assertion factory.

        Raises:
            ConfigurationError: If the key exists and allow_overwrite is False
        """
        key = key.lower()
        with self._lock:
            if not allow_overwrite and key in self._items:
                raise ConfigurationError(
                    f"Assertion type '{key}' already registered in {self._name}",
                    context={"key": key, "registry": self._name},
                )
            self._items[key] = factory

    def get(self, key: str) -> Callable[[FieldBuilder, dict[str, Any]], AssertionBuilder]:
        """Get a factory by type name.

        Raises:
            NotFoundError: If the type is not registered
        """
        key = key.lower()
        with self._lock:
            if key not in self._items:
                raise NotFoundError(
                    f"Assertion type not found: {key}",
                    context={"key": key, "registry": self._name, "available_keys": list(self._items)},
                )
            return self._items[key]

    def has(self, key: str) -> bool:
        with self._lock:
            return key.lower() in self._items

    def list_keys(self) -> list[str]:
        with self._lock:
            return list(self._items)


def _apply_bound(builder: BoundedBuilder, config: dict[str, Any]) -> BoundedBuilder:
    for key in BOUND_KEYS:
        if key in config:
            getattr(builder, key)(int(config[key]))
    return builder


def _length(field: FieldBuilder, config: dict[str, Any]) -> AssertionBuilder:
    return _apply_bound(field.assert_that(LengthAssertion), config)  # type: ignore[arg-type]


def _number(field: FieldBuilder, config: dict[str, Any]) -> AssertionBuilder:
    return _apply_bound(field.assert_that(NumberAssertion), config)  # type: ignore[arg-type]


def _contains(field: FieldBuilder, config: dict[str, Any]) -> AssertionBuilder:
    if "text" not in config:
        raise ConfigurationError("contains assertion requires 'text'", context={"field_id": field.id})
    builder: ContainsBuilder = field.assert_that(ContainsAssertion, config["text"])  # type: ignore[assignment]
    if config.get("ignore_case"):
        builder.ignore_case()
    return builder


def _regex(field: FieldBuilder, config: dict[str, Any]) -> AssertionBuilder:
    if "pattern" not in config:
        raise ConfigurationError("regex assertion requires 'pattern'", context={"field_id": field.id})
    description = config.get("description", f"must match {config['pattern']}")
    return field.assert_that(RegexAssertion, config["pattern"], description)


def _uri(field: FieldBuilder, config: dict[str, Any]) -> AssertionBuilder:
    builder: UriBuilder = field.assert_that(UriAssertion)  # type: ignore[assignment]
    if config.get("schemes"):
        builder.has_scheme(config.get("description"), config["schemes"])
    return builder


def _checked(field: FieldBuilder, config: dict[str, Any]) -> AssertionBuilder:
    return field.assert_that(CheckedStateAssertion, bool(config.get("checked", True)))


assertion_registry = AssertionRegistry()
assertion_registry.register("not_empty", lambda field, config: field.assert_that(NotEmptyAssertion))
assertion_registry.register("length", _length)
assertion_registry.register("number", _number)
assertion_registry.register("contains", _contains)
assertion_registry.register("regex", _regex)
assertion_registry.register("email", lambda field, config: field.assert_that(EmailAssertion))
assertion_registry.register("url", lambda field, config: field.assert_that(UrlAssertion))
assertion_registry.register("uri", _uri)
assertion_registry.register("checked", _checked)


def register_assertion(
    name: str,
    factory: Callable[[FieldBuilder, dict[str, Any]], AssertionBuilder],
    allow_overwrite: bool = False,
) -> None:
    """Make a custom assertion type available to ``FormFactory``."""
    assertion_registry.register(name, factory, allow_overwrite=allow_overwrite)


def build_condition(config: dict[str, Any]) -> Condition:
    """Build a field gate from its configuration.

    Raises:
        ConfigurationError: If the gate has no recognized form
    """
    if "field" in config:
        return ValueEquals(config["field"], config.get("equals", True))
    if "valid" in config:
        return FieldValid(config["valid"])
    if "context" in config:
        return ContextFlag(config["context"])
    raise ConfigurationError(
        "Condition must specify 'field', 'valid' or 'context'",
        context={"condition": config},
    )


class FormFactory:
    """Factory for creating forms from configuration."""

    def __init__(self, registry: AssertionRegistry | None = None):
        self.registry = registry or assertion_registry

    def create(self, container: Container | None = None, **config: Any) -> Form:
        """Create and freeze a Form from configuration.

        Args:
            container: Container used to locate every field's source
            **config: Form configuration

        Returns:
            Frozen Form instance

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        name = config.get("name", "unnamed_form")
        logger.info(f"Creating form: {name}")

        if container is None:
            raise ConfigurationError(
                f"Form '{name}' needs a container to locate its fields",
                context={"form": name},
            )

        form = Form(container, name=name)
        for field_config in config.get("fields", []):
            self._add_field(form, field_config)
        return form.freeze()

    def _add_field(self, form: Form, field_config: dict[str, Any]) -> None:
        field_id = field_config.get("id") or field_config.get("name")
        if not field_id:
            raise ConfigurationError(
                f"Field configuration missing 'id' in form '{form.name}'",
                context={"field": field_config},
            )

        builder = form.field(field_id, label=field_config.get("label"))
        if field_config.get("when"):
            builder.conditional(build_condition(field_config["when"]))

        for assertion_config in field_config.get("assertions", []):
            self._add_assertion(builder, assertion_config)

    def _add_assertion(self, builder: FieldBuilder, assertion_config: dict[str, Any]) -> None:
        options = dict(assertion_config)
        assertion_type = str(options.pop("type", "")).lower()

        if not self.registry.has(assertion_type):
            logger.warning(f"Unknown assertion type: {assertion_type}")
            return

        when = options.pop("when", None)
        assertion = self.registry.get(assertion_type)(builder, options)
        if when:
            assertion.when(build_condition(when))


def load_form_config(path: str | Path) -> dict[str, Any]:
    """Read a form configuration file (YAML or JSON, by suffix).

    Raises:
        NotFoundError: If the file does not exist
        ConfigurationError: If the format is unsupported or the content is not a mapping
    """
    path = Path(path)
    if not path.exists():
        raise NotFoundError(f"Form configuration file not found: {path}", context={"path": str(path)})

    suffix = path.suffix.lower()
    with open(path) as f:
        if suffix in [".yaml", ".yml"]:
            data = yaml.safe_load(f) or {}
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise ConfigurationError(f"Unsupported file format: {suffix}", context={"path": str(path)})

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Form configuration must be a mapping, got {type(data).__name__}",
            context={"path": str(path)},
        )
    return data


def form_from_file(path: str | Path, container: Container) -> Form:
    """Load a configuration file and build its form."""
    return form_factory.create(container, **load_form_config(path))


form_factory = FormFactory()
