"""Tests for conditions and the form state snapshot."""

import pytest

from dataknobs_forms.conditions import (
    All,
    AnyOf,
    Condition,
    ContextFlag,
    FieldValid,
    FormState,
    Not,
    Predicate,
    ValueEquals,
    as_condition,
)
from dataknobs_forms.exceptions import NotFoundError
from dataknobs_forms.result import FieldError


class TestFormState:
    """Test FormState snapshots."""

    def test_evaluated_results(self):
        """Test lookups of earlier results."""
        state = FormState({"a": None, "b": FieldError("b", "bad")})

        assert state.was_evaluated("a")
        assert state.is_valid("a") is True
        assert state.is_valid("b") is False
        assert state.is_valid("c") is None

    def test_snapshot_is_read_only_copy(self):
        """Test that later changes to the source mapping are not visible."""
        evaluated = {"a": None}
        state = FormState(evaluated, {"flag": True})
        evaluated["b"] = None

        assert not state.was_evaluated("b")
        with pytest.raises(TypeError):
            state.context["flag"] = False  # type: ignore[index]

    def test_value_without_reader(self):
        """Test that reading values needs a form."""
        with pytest.raises(NotFoundError):
            FormState().value("a")

    def test_value_with_reader(self):
        """Test reading another field through the reader."""
        state = FormState(reader={"a": 1}.__getitem__)
        assert state.value("a") == 1


class TestConditions:
    """Test built-in conditions."""

    def test_predicate(self):
        """Test a named predicate condition."""
        condition = Predicate("has_flag", lambda state: state.context.get("flag"))

        assert condition.name == "has_flag"
        assert condition.evaluate(FormState(context={"flag": 1}))
        assert not condition.evaluate(FormState())

    def test_field_valid(self):
        """Test FieldValid against evaluated and unevaluated fields."""
        condition = FieldValid("email")

        assert condition.evaluate(FormState({"email": None}))
        assert not condition.evaluate(FormState({"email": FieldError("email", "bad")}))
        assert not condition.evaluate(FormState())

    def test_value_equals(self):
        """Test ValueEquals reading through the form reader."""
        values = {"subscribe": True}
        condition = ValueEquals("subscribe", True)
        state = FormState(reader=values.__getitem__)

        assert condition.evaluate(state)
        values["subscribe"] = False
        assert not condition.evaluate(state)

    def test_context_flag(self):
        """Test ContextFlag."""
        condition = ContextFlag("strict")
        assert condition.evaluate(FormState(context={"strict": True}))
        assert not condition.evaluate(FormState(context={"strict": False}))
        assert not condition.evaluate(FormState())


class TestComposition:
    """Test condition operators."""

    def setup_method(self):
        self.yes = Predicate("yes", lambda state: True)
        self.no = Predicate("no", lambda state: False)
        self.state = FormState()

    def test_and(self):
        """Test AND composition and flattening."""
        combined = self.yes & self.no
        assert isinstance(combined, All)
        assert not combined.evaluate(self.state)
        assert (self.yes & self.yes).evaluate(self.state)

        flattened = combined & self.yes
        assert len(flattened.conditions) == 3

    def test_or(self):
        """Test OR composition."""
        combined = self.no | self.yes
        assert isinstance(combined, AnyOf)
        assert combined.evaluate(self.state)
        assert not (self.no | self.no).evaluate(self.state)

    def test_not(self):
        """Test negation."""
        negated = ~self.no
        assert isinstance(negated, Not)
        assert negated.evaluate(self.state)
        assert negated.name == "not no"

    def test_and_short_circuits(self):
        """Test that AND stops at the first false condition."""
        calls = []
        spy = Predicate("spy", lambda state: calls.append(1) or True)

        assert not (self.no & spy).evaluate(self.state)
        assert calls == []


class TestAsCondition:
    """Test coercion of callables into conditions."""

    def test_condition_passes_through(self):
        """Test that conditions are returned unchanged."""
        condition = ContextFlag("x")
        assert as_condition(condition) is condition

    def test_callable_is_wrapped(self):
        """Test that plain functions become named predicates."""

        def newsletter_enabled(state):
            return state.context.get("newsletter")

        condition = as_condition(newsletter_enabled)
        assert isinstance(condition, Condition)
        assert condition.name == "newsletter_enabled"
        assert condition.evaluate(FormState(context={"newsletter": True}))

    def test_rejects_non_callable(self):
        """Test that other objects are rejected."""
        with pytest.raises(TypeError):
            as_condition("not a condition")  # type: ignore[arg-type]
