"""
Client-side event notifications.

`NotificationScheduler` arms one timer per upcoming event and walks each
event through:

    IDLE -> ARMED -> FIRED -> SNOOZE_PENDING -> (ARMED | DISMISSED)

- ARMED: a timer fires at the event's start time.
- FIRED: an alert is showing; a follow-up timer runs for
  `follow_up_seconds`.
- SNOOZE_PENDING: the alert was still open when the follow-up elapsed, so
  it was replaced by a "Snooze event?" prompt. Accepting (`snooze()`) arms
  a new fire `snooze_seconds` later.
- DISMISSED: the user closed the alert/prompt or the scheduler was closed.

`rebuild()` is the only way to feed events in. It cancels every timer and
open alert, then arms from scratch; in-flight alerts are not carried over.

Timers come from `call_later(delay, callback, *args)` returning a handle with
`cancel()`, which is exactly `asyncio.AbstractEventLoop.call_later`. The
display side is a `Notifier`.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Protocol
from uuid import UUID

from models import Event
from settings import settings

logger = logging.getLogger(__name__)

DEFAULT_BODY = "Your scheduled event is now."
DEFAULT_ICON = "/calendrix-icon.png"


class NotificationState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    FIRED = "fired"
    SNOOZE_PENDING = "snooze_pending"
    DISMISSED = "dismissed"


class Alert(Protocol):
    def close(self) -> None: ...


class Notifier(Protocol):
    def request_permission(self) -> bool: ...

    def show(self, title: str, body: str, icon: Optional[str] = None,
             require_interaction: bool = False) -> Alert: ...


@dataclass
class _Slot:
    event: Event
    state: NotificationState = NotificationState.IDLE
    timers: List[asyncio.TimerHandle] = field(default_factory=list)
    alert: Optional[Alert] = None

    def cancel_timers(self) -> None:
        for handle in self.timers:
            handle.cancel()
        self.timers.clear()

    def close_alert(self) -> None:
        if self.alert is not None:
            self.alert.close()
            self.alert = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationScheduler:
    """Owns the mapping event id -> timers/alert for one client session."""

    def __init__(
        self,
        notifier: Notifier,
        call_later: Optional[Callable] = None,
        now: Callable[[], datetime] = _utcnow,
        follow_up_seconds: float = settings.notify_follow_up_seconds,
        snooze_seconds: float = settings.notify_snooze_seconds,
        icon: Optional[str] = DEFAULT_ICON,
    ):
        self.notifier = notifier
        self._call_later = call_later
        self.now = now
        self.follow_up_seconds = follow_up_seconds
        self.snooze_seconds = snooze_seconds
        self.icon = icon
        self._slots: Dict[UUID, _Slot] = {}

    def rebuild(self, events: Iterable[Event]) -> int:
        """Drop all pending notifications and arm the given events.

        Returns how many events were armed. Events starting now or in the
        past are tracked but never armed.
        """

        self.cancel_all()
        now = self.now()
        armed = 0
        for event in events:
            slot = _Slot(event)
            self._slots[event.id] = slot
            delay = (event.start_time - now).total_seconds()
            if delay > 0:
                self._arm(slot, delay)
                armed += 1
        logger.debug("Armed %d of %d events", armed, len(self._slots))
        return armed

    def state(self, event_id: UUID) -> NotificationState:
        slot = self._slots.get(event_id)
        return slot.state if slot else NotificationState.IDLE

    def pending(self) -> int:
        """Number of live timer handles across all events."""
        return sum(len(s.timers) for s in self._slots.values())

    def snooze(self, event_id: UUID) -> bool:
        """User accepted the snooze prompt: fire again after `snooze_seconds`."""

        slot = self._slots.get(event_id)
        if slot is None or slot.state is not NotificationState.SNOOZE_PENDING:
            return False
        slot.close_alert()
        slot.cancel_timers()
        self._arm(slot, self.snooze_seconds)
        logger.info("Snoozed %r for %gs", slot.event.title, self.snooze_seconds)
        return True

    def dismiss(self, event_id: UUID) -> bool:
        """User closed the alert or prompt. Cancels everything for the event."""

        slot = self._slots.get(event_id)
        if slot is None:
            return False
        slot.cancel_timers()
        slot.close_alert()
        slot.state = NotificationState.DISMISSED
        return True

    def close(self) -> None:
        """Dismiss every event (window closed / shutdown)."""

        for event_id in list(self._slots):
            self.dismiss(event_id)

    def cancel_all(self) -> None:
        for slot in self._slots.values():
            slot.cancel_timers()
            slot.close_alert()
        self._slots.clear()

    def _schedule(self, delay: float, callback, *args):
        call_later = self._call_later or asyncio.get_running_loop().call_later
        return call_later(delay, callback, *args)

    def _arm(self, slot: _Slot, delay: float) -> None:
        slot.timers.append(self._schedule(delay, self._fire, slot))
        slot.state = NotificationState.ARMED

    def _live(self, slot: _Slot) -> bool:
        # Callbacks from a previous rebuild must not touch the new slots.
        return self._slots.get(slot.event.id) is slot

    def _fire(self, slot: _Slot) -> None:
        if not self._live(slot) or slot.state is not NotificationState.ARMED:
            return
        slot.timers.clear()
        if not self.notifier.request_permission():
            logger.warning("Notification permission denied")
            slot.state = NotificationState.IDLE
            return

        event = slot.event
        slot.alert = self.notifier.show(
            f"Event: {event.title}",
            event.description or DEFAULT_BODY,
            icon=event.image_url or self.icon,
        )
        slot.state = NotificationState.FIRED
        slot.timers.append(self._schedule(self.follow_up_seconds, self._follow_up, slot))
        logger.info("Notified %r", event.title)

    def _follow_up(self, slot: _Slot) -> None:
        if not self._live(slot) or slot.state is not NotificationState.FIRED:
            return
        slot.timers.clear()
        slot.close_alert()
        slot.alert = self.notifier.show(
            "Snooze event?",
            f'Click to snooze "{slot.event.title}" for {self.snooze_seconds / 60:g} minutes',
            icon=self.icon,
            require_interaction=True,
        )
        slot.state = NotificationState.SNOOZE_PENDING
        logger.info("Snooze offered for %r (event %s)", slot.event.title, slot.event.id)


class LoggedAlert:
    def __init__(self, title: str):
        self.title = title
        self.open = True

    def close(self) -> None:
        self.open = False
        logger.debug("Closed %r", self.title)


class LoggingNotifier:
    """Notifier for terminals: alerts are written to the log."""

    def request_permission(self) -> bool:
        return True

    def show(self, title, body, icon=None, require_interaction=False):
        logger.info("%s - %s", title, body)
        return LoggedAlert(title)
