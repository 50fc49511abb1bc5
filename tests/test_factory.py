"""Tests for building forms from configuration."""

import json

import pytest
import yaml

from dataknobs_forms import (
    ConfigurationError,
    FieldError,
    FormFactory,
    InMemoryContainer,
    NotFoundError,
    assertion_registry,
    form_factory,
    form_from_file,
    load_form_config,
)
from dataknobs_forms.assertions import PredicateAssertion
from dataknobs_forms.factory import AssertionRegistry, build_condition
from dataknobs_forms.conditions import ContextFlag, FieldValid, ValueEquals


SIGNUP_CONFIG = {
    "name": "signup",
    "fields": [
        {
            "id": "email",
            "label": "Email",
            "assertions": [
                {"type": "not_empty"},
                {"type": "email"},
            ],
        },
        {
            "id": "age",
            "when": {"field": "show_age", "equals": True},
            "assertions": [
                {"type": "number", "at_least": 18},
            ],
        },
        {
            "id": "website",
            "assertions": [
                {"type": "uri", "schemes": ["https"], "description": "must use https"},
            ],
        },
    ],
}


@pytest.fixture
def signup_container():
    return InMemoryContainer({
        "email": "",
        "age": "12",
        "show_age": False,
        "website": "https://example.com",
    })


class TestFormFactory:
    """Test FormFactory.create."""

    def test_create_form(self, signup_container):
        """Test building and validating a configured form."""
        form = form_factory.create(signup_container, **SIGNUP_CONFIG)

        assert form.frozen
        assert form.name == "signup"
        assert form.field_ids == ["email", "age", "website"]
        assert form.validate().errors == (FieldError("email", "cannot be empty", label="Email"),)

    def test_configured_condition(self, signup_container):
        """Test that the field gate from configuration applies."""
        form = form_factory.create(signup_container, **SIGNUP_CONFIG)
        signup_container.set("email", "a@b.com")
        assert form.validate().success

        signup_container.set("show_age", True)
        assert form.validate().messages() == {"age": "must be at least 18"}

    def test_configured_uri_schemes(self, signup_container):
        """Test uri options from configuration."""
        form = form_factory.create(signup_container, **SIGNUP_CONFIG)
        signup_container.set("website", "http://example.com")
        assert form.validate_field("website") == FieldError("website", "must use https")

    def test_requires_container(self):
        """Test that configured forms need a container."""
        with pytest.raises(ConfigurationError):
            form_factory.create(None, **SIGNUP_CONFIG)

    def test_field_requires_id(self, signup_container):
        """Test that every field definition needs an id."""
        with pytest.raises(ConfigurationError):
            form_factory.create(signup_container, fields=[{"assertions": []}])

    def test_unknown_assertion_type_skipped(self, signup_container, caplog):
        """Test that unknown assertion types are skipped with a warning."""
        form = form_factory.create(
            signup_container,
            fields=[{"id": "email", "assertions": [{"type": "telepathy"}]}],
        )
        assert form.get_field("email").assertions == ()
        assert "Unknown assertion type: telepathy" in caplog.text

    def test_two_bounds_rejected(self, signup_container):
        """Test that conflicting bounds in configuration are an error."""
        with pytest.raises(ConfigurationError):
            form_factory.create(
                signup_container,
                fields=[{"id": "age", "assertions": [{"type": "length", "exactly": 2, "at_most": 4}]}],
            )

    def test_assertion_level_when(self, signup_container):
        """Test gating a configured assertion."""
        form = form_factory.create(
            signup_container,
            fields=[{
                "id": "email",
                "assertions": [{"type": "not_empty", "when": {"context": "strict"}}],
            }],
        )
        assert form.validate().success
        assert not form.validate(context={"strict": True}).success

    @pytest.mark.parametrize("config,value,message", [
        ({"type": "length", "at_most": 3}, "abcd", "length must be at most 3"),
        ({"type": "contains", "text": "@", "ignore_case": True}, "abc", 'must contain "@"'),
        ({"type": "regex", "pattern": "[a-z]+", "description": "lowercase only"}, "ABC", "lowercase only"),
        ({"type": "url"}, "not a url", "must be a valid URL"),
        ({"type": "checked"}, False, "should be checked"),
        ({"type": "checked", "checked": False}, True, "should not be checked"),
    ])
    def test_assertion_types(self, config, value, message):
        """Test each registered assertion type."""
        container = InMemoryContainer({"x": value})
        form = form_factory.create(container, fields=[{"id": "x", "assertions": [config]}])
        assert form.validate_field("x") == FieldError("x", message)

    def test_missing_required_options(self):
        """Test assertion types that need options."""
        container = InMemoryContainer({"x": ""})
        with pytest.raises(ConfigurationError):
            form_factory.create(container, fields=[{"id": "x", "assertions": [{"type": "contains"}]}])
        with pytest.raises(ConfigurationError):
            form_factory.create(container, fields=[{"id": "x", "assertions": [{"type": "regex"}]}])


class TestAssertionRegistry:
    """Test the assertion registry."""

    def test_builtin_types(self):
        """Test that the built-in assertion types are registered."""
        for key in ["not_empty", "length", "number", "contains", "regex", "email", "url", "uri", "checked"]:
            assert assertion_registry.has(key)

    def test_custom_registry(self):
        """Test registering a custom assertion type in a separate registry."""
        registry = AssertionRegistry("custom")
        registry.register(
            "even",
            lambda field, config: field.assert_that(
                PredicateAssertion, lambda value: int(value) % 2 == 0, "must be even"
            ),
        )
        container = InMemoryContainer({"n": "3"})
        form = FormFactory(registry).create(container, fields=[{"id": "n", "assertions": [{"type": "EVEN"}]}])

        assert form.validate_field("n") == FieldError("n", "must be even")
        assert registry.list_keys() == ["even"]

    def test_duplicate_and_missing(self):
        """Test registry errors."""
        registry = AssertionRegistry()
        registry.register("a", lambda field, config: None)
        with pytest.raises(ConfigurationError):
            registry.register("a", lambda field, config: None)
        registry.register("a", lambda field, config: None, allow_overwrite=True)
        with pytest.raises(NotFoundError):
            registry.get("b")


class TestBuildCondition:
    """Test condition configuration."""

    def test_forms(self):
        """Test each supported condition form."""
        assert isinstance(build_condition({"field": "x", "equals": 1}), ValueEquals)
        assert build_condition({"field": "x"}).expected is True
        assert isinstance(build_condition({"valid": "x"}), FieldValid)
        assert isinstance(build_condition({"context": "x"}), ContextFlag)

    def test_invalid(self):
        """Test an unrecognized condition."""
        with pytest.raises(ConfigurationError):
            build_condition({"unknown": "x"})


class TestConfigFiles:
    """Test loading configuration files."""

    def test_yaml(self, tmp_path, signup_container):
        """Test building a form from a YAML file."""
        path = tmp_path / "signup.yaml"
        path.write_text(yaml.safe_dump(SIGNUP_CONFIG))

        form = form_from_file(path, signup_container)
        assert form.field_ids == ["email", "age", "website"]

    def test_json(self, tmp_path):
        """Test reading a JSON file."""
        path = tmp_path / "signup.json"
        path.write_text(json.dumps(SIGNUP_CONFIG))
        assert load_form_config(path) == SIGNUP_CONFIG

    def test_missing_file(self, tmp_path):
        """Test a missing configuration file."""
        with pytest.raises(NotFoundError):
            load_form_config(tmp_path / "absent.yaml")

    def test_unsupported_suffix(self, tmp_path):
        """Test an unsupported file format."""
        path = tmp_path / "signup.toml"
        path.write_text("name = 'x'")
        with pytest.raises(ConfigurationError):
            load_form_config(path)

    def test_not_a_mapping(self, tmp_path):
        """Test a YAML document that is not a mapping."""
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            load_form_config(path)
