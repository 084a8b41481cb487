"""
In-process publish/subscribe for cart changes.

Several independent views care when a cart changes (the header badge,
the open cart panel, the checkout summary). Mutations publish one
CartChanged event after their transaction commits and every subscriber
is called synchronously, in the order it subscribed.
"""

from dataclasses import dataclass
from typing import Callable

from utils.logger import get_logger

logger = get_logger(__name__)


ADDED = "added"
UPDATED = "updated"
REMOVED = "removed"
CHECKED_OUT = "checked_out"


@dataclass(frozen=True)
class CartChanged:
    user_id: str
    reason: str


class EventChannel:

    def __init__(self, name: str):
        self.name = name
        self._subscribers: list[Callable] = []

    def subscribe(self, callback: Callable) -> Callable:
        if callback not in self._subscribers:
            self._subscribers.append(callback)
        return callback

    def unsubscribe(self, callback: Callable):
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def publish(self, event) -> None:
        # the mutation already committed, a failing subscriber must not undo it
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Event subscriber failed",
                    extra={"channel": self.name, "subscriber": getattr(callback, "__name__", repr(callback))}
                )


cart_changed = EventChannel("cart_changed")


def log_cart_change(event: CartChanged):
    logger.info(
        "Cart changed",
        extra={"user_id": event.user_id, "reason": event.reason}
    )
