"""
Tests for the reminder gate and polling loop.
"""

import pytest
import asyncio
from datetime import date, datetime, time
from unittest.mock import AsyncMock, Mock

from sentinel.config import get_config
from sentinel.services.reminders import ReminderScheduler, WeeklyWindow, is_due


WINDOW = WeeklyWindow()
MONDAY = date(2024, 6, 3)


def at(day: date, hour: int, minute: int) -> datetime:
    return datetime.combine(day, time(hour, minute))


class TestIsDue:

    def test_due_after_cutoff_on_weekday(self):
        assert is_due(at(MONDAY, 9, 30), None, WINDOW)
        assert is_due(at(MONDAY, 17, 0), "2024-05-31", WINDOW)

    def test_not_due_before_cutoff(self):
        assert not is_due(at(MONDAY, 9, 29), None, WINDOW)

    def test_not_due_on_sunday(self):
        assert not is_due(at(date(2024, 6, 9), 12, 0), None, WINDOW)

    def test_saturday_is_active(self):
        assert is_due(at(date(2024, 6, 8), 12, 0), None, WINDOW)

    def test_not_due_twice_on_same_day(self):
        assert not is_due(at(MONDAY, 10, 0), "2024-06-03", WINDOW)
        assert not is_due(at(MONDAY, 10, 0), MONDAY, WINDOW)


def test_window_from_config():
    window = WeeklyWindow.from_config(get_config("test"))
    assert window.cutoff == time(9, 30)
    assert window.active_weekdays == frozenset(range(6))
    assert window.describe() == "Mon, Tue, Wed, Thu, Fri, Sat at 09:30"


class TestScheduler:

    def test_tick_opens_one_prompt(self):
        scheduler = ReminderScheduler(WINDOW)
        assert scheduler.tick(at(MONDAY, 10, 0)) is True
        assert scheduler.tick(at(MONDAY, 10, 1)) is False

    def test_confirm_records_date_and_stops_firing(self):
        on_confirm = Mock()
        scheduler = ReminderScheduler(WINDOW, on_confirm=on_confirm)
        scheduler.tick(at(MONDAY, 10, 0))

        assert scheduler.confirm_sent(MONDAY) == "2024-06-03"
        on_confirm.assert_called_once_with("2024-06-03")
        assert scheduler.tick(at(MONDAY, 18, 0)) is False
        assert scheduler.tick(at(date(2024, 6, 4), 9, 45)) is True

    def test_dismiss_allows_prompt_again(self):
        scheduler = ReminderScheduler(WINDOW)
        scheduler.tick(at(MONDAY, 10, 0))
        scheduler.dismiss()
        assert scheduler.tick(at(MONDAY, 10, 1)) is True

    def test_timed_dismiss_waits_one_interval(self):
        scheduler = ReminderScheduler(WINDOW, poll_seconds=60)
        scheduler.tick(at(MONDAY, 10, 0))
        scheduler.dismiss(at(MONDAY, 10, 0))

        assert scheduler.tick(at(MONDAY, 10, 0)) is False
        assert scheduler.tick(at(MONDAY, 10, 1)) is True

    def test_persisted_date_is_respected(self):
        scheduler = ReminderScheduler(WINDOW, last_fired_date="2024-06-03")
        assert scheduler.is_due(at(MONDAY, 12, 0)) is False


class TestRunLoop:

    @pytest.mark.asyncio
    async def test_fires_once_and_stops(self):
        stop_event = asyncio.Event()
        scheduler = ReminderScheduler(WINDOW, poll_seconds=0.01)
        on_due = AsyncMock(side_effect=lambda: stop_event.set())

        await asyncio.wait_for(
            scheduler.run(on_due, stop_event, clock=lambda: at(MONDAY, 10, 0)),
            timeout=2,
        )

        on_due.assert_awaited_once()
        assert scheduler.prompt_open is True

    @pytest.mark.asyncio
    async def test_handler_error_keeps_polling(self):
        stop_event = asyncio.Event()
        scheduler = ReminderScheduler(WINDOW, poll_seconds=0.01)
        calls = []

        async def on_due():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("completion service down")
            stop_event.set()

        await asyncio.wait_for(
            scheduler.run(on_due, stop_event, clock=lambda: at(MONDAY, 10, 0)),
            timeout=2,
        )
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_stop_event_ends_idle_loop(self):
        stop_event = asyncio.Event()
        scheduler = ReminderScheduler(WINDOW, poll_seconds=0.01)
        on_due = AsyncMock()

        task = asyncio.create_task(
            scheduler.run(on_due, stop_event, clock=lambda: at(date(2024, 6, 9), 10, 0))
        )
        await asyncio.sleep(0.05)
        stop_event.set()
        await asyncio.wait_for(task, timeout=2)

        on_due.assert_not_awaited()
