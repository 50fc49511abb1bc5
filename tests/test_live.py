"""Tests for live (reactive) revalidation."""

import pytest

from dataknobs_forms import (
    ConfigurationError,
    FieldError,
    Form,
    InMemorySource,
    NotFoundError,
    build_form,
)


@pytest.fixture
def results():
    """Collected (field_id, error) pairs from live callbacks."""
    return []


@pytest.fixture
def email_form(container):
    def configure(form):
        form.field("name").is_not_empty()
        form.field("email").is_email()

    return build_form(configure, container)


class TestLiveValidation:
    """Test live revalidation driven by source changes."""

    def test_revalidates_on_change(self, container, email_form, results):
        """Test that each change revalidates the field and reports the outcome."""
        email_form.live("email", lambda field_id, error: results.append((field_id, error)))

        container.set("email", "broken")
        container.set("email", "a@b.com")

        assert results == [
            ("email", FieldError("email", "must be a valid email address")),
            ("email", None),
        ]

    def test_only_the_watched_field_runs(self, container, results, spy_factory):
        """Test that live revalidation does not touch other fields."""
        spy = spy_factory()

        def configure(form):
            form.field("name").assert_that(spy)
            form.field("email").is_email()

        form = build_form(configure, container)
        form.live("email", lambda field_id, error: results.append(field_id))
        container.set("email", "x@y.org")

        assert results == ["email"]
        assert spy.calls == []

    def test_immediate(self, email_form, results):
        """Test validating once when live mode starts."""
        email_form.live("email", lambda field_id, error: results.append(error), immediate=True)
        assert results == [None]

    def test_cancel(self, container, email_form, results):
        """Test that a cancelled subscription stops receiving changes."""
        subscription = email_form.live("email", lambda field_id, error: results.append(error))
        assert email_form.live_subscriptions == {"email": subscription}

        subscription.cancel()
        container.set("email", "broken")

        assert results == []
        assert not subscription.active
        assert email_form.live_subscriptions == {}
        assert container.locate("email").listener_count == 0
        subscription.cancel()

    def test_restart_replaces_subscription(self, container, email_form, results):
        """Test that starting live mode twice keeps only the newest subscription."""
        first = email_form.live("email", lambda field_id, error: results.append("first"))
        second = email_form.live("email", lambda field_id, error: results.append("second"))

        container.set("email", "a@b.com")

        assert not first.active
        assert second.active
        assert results == ["second"]
        assert container.locate("email").listener_count == 1

    def test_stop_live_and_close(self, container, email_form, results):
        """Test stopping one field and closing the whole form."""
        email_form.live("email", lambda field_id, error: results.append(field_id))
        email_form.live("name", lambda field_id, error: results.append(field_id))

        assert email_form.stop_live("email") is True
        assert email_form.stop_live("email") is False
        container.set("email", "a@b.com")
        container.set("name", "Grace")
        assert results == ["name"]

        email_form.close()
        container.set("name", "Ada")
        assert results == ["name"]
        assert email_form.live_subscriptions == {}

    def test_context_manager_closes(self, container, results):
        """Test that leaving a with-block cancels subscriptions."""
        with build_form(lambda f: f.field("email").is_email(), container) as form:
            form.live("email", lambda field_id, error: results.append(error))
        container.set("email", "broken")
        assert results == []

    def test_explicit_source(self, results):
        """Test live mode with a notifier other than the field's own source."""
        source = InMemorySource("", name="code")
        form = Form()
        form.field("code", accessor=source.read).length().exactly(4)
        form.live("code", lambda field_id, error: results.append(error), source=source)

        source.set("123")
        source.set("1234")
        assert results == [FieldError("code", "length must be exactly 4"), None]

    def test_unknown_field(self, email_form):
        """Test that live mode requires a registered field."""
        with pytest.raises(NotFoundError):
            email_form.live("missing", lambda field_id, error: None)

    def test_no_notifier(self):
        """Test that fields read through plain accessors need an explicit notifier."""
        form = Form()
        form.field("x", accessor=lambda: "")
        with pytest.raises(ConfigurationError):
            form.live("x", lambda field_id, error: None)


class TestInMemorySource:
    """Test the in-memory value source."""

    def test_read_and_set(self):
        """Test reading and replacing values."""
        source = InMemorySource(1, name="n")
        source.set(2)
        assert source.read() == 2

    def test_listener_errors_do_not_stop_others(self, caplog):
        """Test that a failing listener is logged and others still run."""
        source = InMemorySource()
        seen = []

        def broken(value):
            raise RuntimeError("boom")

        source.subscribe(broken)
        source.subscribe(seen.append)
        source.set("x")

        assert seen == ["x"]
        assert "Error in change listener" in caplog.text

    def test_detach(self):
        """Test that a detached source can no longer be read or set."""
        from dataknobs_forms import UnavailableSourceError

        source = InMemorySource("v", name="gone")
        source.detach()
        assert source.detached
        with pytest.raises(UnavailableSourceError) as exc_info:
            source.read()
        assert exc_info.value.context == {"source": "gone"}
        with pytest.raises(UnavailableSourceError):
            source.set("w")
