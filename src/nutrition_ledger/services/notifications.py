"""Notification gates for calorie alerts and meal reminders."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from nutrition_ledger.domain.advice import Tip
from nutrition_ledger.domain.meals import MacroProfile
from nutrition_ledger.domain.profile import DailyTarget

CALORIE_LIMIT_MESSAGE = Tip.CALORIE_LIMIT_EXCEEDED.value
IDLE_MEAL_MESSAGE = "No meals logged for a while. Time to log your next meal?"
DEFAULT_IDLE_THRESHOLD = timedelta(hours=4)

_logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Fire-and-forget local alert channel."""

    @property
    def permission_granted(self) -> bool:
        """Return True when alerts can actually be delivered."""

    def notify(self, message: str) -> None:
        """Deliver a message; silently no-op without permission."""


@dataclass
class CalorieAlertLatch:
    """Edge-triggered once-per-day gate for the calorie alert.

    Armed while ``fired`` is False. Crossing the calorie target fires the
    notifier and moves to fired; only ``reset`` re-arms it.
    """

    fired: bool = False

    def evaluate(
        self,
        totals: MacroProfile,
        target: DailyTarget | None,
        notifier: Notifier,
    ) -> bool:
        """Fire the alert on the first crossing; return True if it fired."""
        if self.fired or target is None:
            return False
        if totals.calories <= target.calorie_target:
            return False
        self.fired = True
        send_notification(notifier, CALORIE_LIMIT_MESSAGE)
        return True

    def reset(self) -> None:
        """Re-arm the latch."""
        self.fired = False


def is_meal_overdue(
    last_meal_at: datetime | None,
    now: datetime,
    threshold: timedelta = DEFAULT_IDLE_THRESHOLD,
) -> bool:
    """Return True when more than ``threshold`` passed since the last meal."""
    if last_meal_at is None:
        return False
    return now - last_meal_at > threshold


def send_notification(notifier: Notifier, message: str) -> None:
    """Call the notifier, logging instead of raising on failure."""
    try:
        notifier.notify(message)
    except Exception:
        _logger.exception("Notifier failed", extra={"notify_message": message})
