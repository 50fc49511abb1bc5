"""Live (reactive) revalidation of single fields.

Live mode subscribes to a field's change notifications and revalidates
only that field on each change, handing the outcome to a callback. When
and how often changes are reported (every keystroke, debounced, on blur)
is decided by whoever emits the notifications, not here.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from .form import Form
    from .result import FieldError
    from .sources import ChangeNotifier

logger = logging.getLogger(__name__)


@dataclass
class Subscription:
    """Handle for one field's live revalidation.

    Attributes:
        field_id: The field being revalidated
        subscription_id: Unique identifier for this subscription
        created_at: When the subscription was created
    """

    field_id: str
    subscription_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # Set by the LiveValidation that creates the subscription
    _cancel_callback: Any = field(default=None, repr=False)
    _active: bool = field(default=True, repr=False)

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Cancel this subscription; safe to call more than once."""
        if not self._active:
            return
        self._active = False
        if self._cancel_callback:
            self._cancel_callback(self)


class LiveValidation:
    """Tracks the live subscriptions of one form, at most one per field."""

    def __init__(self, form: Form):
        self._form = form
        self._subscriptions: dict[str, Subscription] = {}
        self._unsubscribers: dict[str, Callable[[], None]] = {}

    @property
    def subscriptions(self) -> dict[str, Subscription]:
        """Active subscriptions keyed by field id."""
        return dict(self._subscriptions)

    def start(
        self,
        field_id: str,
        notifier: ChangeNotifier,
        on_result: Callable[[str, FieldError | None], None],
        immediate: bool = False,
    ) -> Subscription:
        """Revalidate a field whenever the notifier reports a change.

        An existing subscription for the same field is cancelled first.

        Args:
            field_id: Registered field id
            notifier: Source of change notifications
            on_result: Called with the field id and its error after each change
            immediate: Also revalidate once right away

        Returns:
            Subscription handle
        """
        # Fails with NotFoundError before anything is subscribed
        self._form.get_field(field_id)
        self.stop(field_id)

        def on_change(_value: Any = None) -> None:
            error = self._form.validate_field(field_id)
            logger.debug("Live revalidation of %s: %s", field_id, error.message if error else "ok")
            on_result(field_id, error)

        subscription = Subscription(field_id, _cancel_callback=self._cancel)
        self._unsubscribers[field_id] = notifier.subscribe(on_change)
        self._subscriptions[field_id] = subscription
        logger.debug("Live revalidation started for %s (%s)", field_id, subscription.subscription_id[:8])

        if immediate:
            on_change()
        return subscription

    def stop(self, field_id: str) -> bool:
        """Cancel the live subscription of a field.

        Returns:
            True if a subscription was cancelled
        """
        subscription = self._subscriptions.get(field_id)
        if subscription is None:
            return False
        subscription.cancel()
        return True

    def close(self) -> None:
        """Cancel every live subscription."""
        for subscription in list(self._subscriptions.values()):
            subscription.cancel()

    def _cancel(self, subscription: Subscription) -> None:
        if self._subscriptions.get(subscription.field_id) is not subscription:
            return
        del self._subscriptions[subscription.field_id]
        unsubscribe = self._unsubscribers.pop(subscription.field_id, None)
        if unsubscribe is not None:
            unsubscribe()
        logger.debug("Live revalidation stopped for %s", subscription.field_id)

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._subscriptions

    def __iter__(self) -> Iterator[str]:
        return iter(self._subscriptions)

    def __len__(self) -> int:
        return len(self._subscriptions)
