"""
Reminder Scheduler
Decides whether the once-daily reminder prompt is due and polls that
predicate on a fixed cadence.
"""

import asyncio
from datetime import date, datetime, time, timedelta
from typing import Awaitable, Callable, FrozenSet, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from sentinel.config import Config
from sentinel.utils.logging import setup_logging


logger = setup_logging(__name__)

WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


class WeeklyWindow(BaseModel):
    """Active weekdays (datetime.weekday(), Monday = 0) and a time-of-day cutoff."""
    model_config = ConfigDict(frozen=True)

    active_weekdays: FrozenSet[int] = Field(default_factory=lambda: frozenset(range(6)))
    cutoff: time = time(9, 30)

    @classmethod
    def from_config(cls, config: Config) -> "WeeklyWindow":
        hours, minutes = (int(p) for p in config.REMINDER_CUTOFF.split(":"))
        return cls(
            active_weekdays=frozenset(d for d in range(7) if d != config.REMINDER_DAY_OFF),
            cutoff=time(hours, minutes),
        )

    def describe(self) -> str:
        days = ", ".join(WEEKDAY_NAMES[d] for d in sorted(self.active_weekdays))
        return f"{days} at {self.cutoff.strftime('%H:%M')}"


def _as_date_string(value: Union[None, str, date]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    return value.strip() or None


def is_due(now: datetime, last_fired_date: Union[None, str, date], window: WeeklyWindow) -> bool:
    """
    True iff today is an active weekday, the cutoff has passed, and no
    reminder has been dispatched today.

    `last_fired_date` is the persisted YYYY-MM-DD string (or None).
    """
    if now.weekday() not in window.active_weekdays:
        return False
    if now.time() < window.cutoff:
        return False
    return _as_date_string(last_fired_date) != now.date().isoformat()


class ReminderScheduler:
    """
    Polls `is_due` on a fixed interval.

    While a prompt is open (a draft is being shown to the user) the
    scheduler does not fire again. Confirming the send records today's date;
    dismissing without sending lets the next poll prompt again, one full
    interval after the dismissal when its time is given.
    """

    def __init__(
        self,
        window: WeeklyWindow,
        last_fired_date: Optional[str] = None,
        poll_seconds: float = 60,
        on_confirm: Optional[Callable[[str], None]] = None,
    ):
        self.window = window
        self.last_fired_date = _as_date_string(last_fired_date)
        self.poll_seconds = poll_seconds
        self.prompt_open = False
        self.quiet_until: Optional[datetime] = None
        self._on_confirm = on_confirm

    def is_due(self, now: datetime) -> bool:
        return is_due(now, self.last_fired_date, self.window)

    def tick(self, now: datetime) -> bool:
        """Open the prompt if due. Returns True when a new prompt was opened."""
        if self.prompt_open or (self.quiet_until is not None and now < self.quiet_until):
            return False
        if not self.is_due(now):
            return False
        self.prompt_open = True
        logger.info(f"Reminder due ({self.window.describe()}); last sent {self.last_fired_date or 'never'}")
        return True

    def confirm_sent(self, today: Union[date, datetime]) -> str:
        """Record a confirmed dispatch; `is_due` stays False until the date changes."""
        if isinstance(today, datetime):
            today = today.date()
        self.last_fired_date = today.isoformat()
        self.prompt_open = False
        if self._on_confirm is not None:
            self._on_confirm(self.last_fired_date)
        logger.info(f"Reminder marked as sent for {self.last_fired_date}")
        return self.last_fired_date

    def dismiss(self, now: Optional[datetime] = None) -> None:
        self.prompt_open = False
        if now is not None:
            self.quiet_until = now + timedelta(seconds=self.poll_seconds)

    async def run(
        self,
        on_due: Callable[[], Awaitable[None]],
        stop_event: asyncio.Event,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """
        Wake every `poll_seconds` until `stop_event` is set.

        `on_due` errors are logged; the loop keeps polling.
        """
        while not stop_event.is_set():
            if self.tick(clock()):
                try:
                    await on_due()
                except Exception as e:
                    logger.error(f"Reminder handler failed: {e}")
                    self.prompt_open = False

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.poll_seconds)
            except asyncio.TimeoutError:
                continue
