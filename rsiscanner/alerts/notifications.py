"""Time-limited, dismissible toast notifications."""

import asyncio
import itertools
import logging
from typing import Callable, Literal, Optional

from rsiscanner.models import ToastDraft, ToastNotification

logger = logging.getLogger(__name__)

DISPLAY_SECONDS = 5.0

QueueEvent = Literal["pushed", "removed"]
Subscriber = Callable[[QueueEvent, ToastNotification], None]


class NotificationQueue:
    """Holds active notifications until they expire or are dismissed.

    Every pushed notification gets a removal timer on the running event
    loop. Dismissing cancels that timer; both paths end in the same removal
    step, so a notification is removed exactly once and dismissing an
    unknown or already-removed id does nothing.
    """

    def __init__(
        self,
        display_seconds: float = DISPLAY_SECONDS,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """Initialize the queue.

        Args:
            display_seconds: How long a notification stays before expiring.
            loop: Event loop for expiry timers. Defaults to the running loop
                at push time.
        """
        self.display_seconds = display_seconds
        self._loop = loop
        self._ids = itertools.count(1)
        self._items: dict[int, ToastNotification] = {}
        self._timers: dict[int, asyncio.TimerHandle] = {}
        self._subscribers: list[Subscriber] = []

    @property
    def items(self) -> list[ToastNotification]:
        """Active notifications in insertion order."""
        return list(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, notification_id: object) -> bool:
        return notification_id in self._items

    def subscribe(self, callback: Subscriber) -> None:
        """Register a sink for ``pushed`` and ``removed`` events."""
        self._subscribers.append(callback)

    def push(self, draft: ToastDraft) -> ToastNotification:
        """Queue a notification and arm its expiry timer.

        Args:
            draft: Notification content from the alert monitor.

        Returns:
            The queued notification with its assigned id.
        """
        toast = ToastNotification(id=next(self._ids), **draft.model_dump())
        loop = self._loop or asyncio.get_running_loop()

        self._items[toast.id] = toast
        self._timers[toast.id] = loop.call_later(self.display_seconds, self._expire, toast.id)
        self._emit("pushed", toast)
        return toast

    def dismiss(self, notification_id: int) -> bool:
        """Remove a notification before it expires.

        Returns:
            True if a notification was removed, False if the id was unknown.
        """
        return self._remove(notification_id)

    def clear(self) -> None:
        """Remove every notification and cancel all timers."""
        for notification_id in list(self._items):
            self._remove(notification_id)

    def _expire(self, notification_id: int) -> None:
        # The handle has fired; drop it so _remove doesn't cancel it
        self._timers.pop(notification_id, None)
        if self._remove(notification_id):
            logger.debug("Notification %d expired", notification_id)

    def _remove(self, notification_id: int) -> bool:
        toast = self._items.pop(notification_id, None)
        if toast is None:
            return False

        timer = self._timers.pop(notification_id, None)
        if timer is not None:
            timer.cancel()

        self._emit("removed", toast)
        return True

    def _emit(self, event: QueueEvent, toast: ToastNotification) -> None:
        for callback in list(self._subscribers):
            callback(event, toast)
