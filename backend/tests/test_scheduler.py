import asyncio
import logging
from datetime import date, datetime, time, timedelta

import pytest
import pytz

from flight_tracker.config import Settings
from flight_tracker.models.price_check import PriceCheck
from flight_tracker.services.travel_date_service import TravelDateService
from price_collector.scheduler import (
    PriceCheckScheduler,
    derive_interval,
    next_scheduled_time,
    parse_slot_times,
)

from conftest import StubProvider

BERLIN = pytz.timezone("Europe/Berlin")
SLOTS = ["08:00", "20:00"]


def berlin(*args):
    return BERLIN.localize(datetime(*args))


@pytest.mark.parametrize("now, expected", [
    (berlin(2026, 3, 1, 7, 59), berlin(2026, 3, 1, 8, 0)),
    (berlin(2026, 3, 1, 8, 0), berlin(2026, 3, 1, 20, 0)),
    (berlin(2026, 3, 1, 12, 30), berlin(2026, 3, 1, 20, 0)),
    (berlin(2026, 3, 1, 20, 0), berlin(2026, 3, 2, 8, 0)),
    (berlin(2026, 3, 1, 23, 45), berlin(2026, 3, 2, 8, 0)),
])
def test_next_scheduled_time_in_berlin(now, expected):
    assert next_scheduled_time(now, SLOTS, BERLIN) == expected


def test_next_scheduled_time_converts_naive_utc():
    # 06:30 UTC is 07:30 in Berlin during winter time
    result = next_scheduled_time(datetime(2026, 1, 15, 6, 30), SLOTS, "Europe/Berlin")

    assert result == berlin(2026, 1, 15, 8, 0)
    assert result.astimezone(pytz.UTC).replace(tzinfo=None) == datetime(2026, 1, 15, 7, 0)


def test_next_scheduled_time_follows_daylight_saving():
    # 2026-03-29 is the spring-forward day; 08:00 CEST is 06:00 UTC
    result = next_scheduled_time(datetime(2026, 3, 29, 5, 0), SLOTS, BERLIN)

    assert result.astimezone(pytz.UTC).replace(tzinfo=None) == datetime(2026, 3, 29, 6, 0)


def test_parse_slot_times_sorts_and_validates():
    assert parse_slot_times(["20:00", "08:00", "08:00"]) == [time(8, 0), time(20, 0)]
    with pytest.raises(ValueError):
        parse_slot_times(["8am"])
    with pytest.raises(ValueError):
        parse_slot_times([])


def test_derive_interval():
    assert derive_interval(SLOTS) == timedelta(hours=12)
    assert derive_interval(["06:00"]) == timedelta(hours=24)
    assert derive_interval(SLOTS, override_hours=3) == timedelta(hours=3)


def test_derive_interval_warns_on_uneven_slots(caplog):
    with caplog.at_level(logging.WARNING, logger="PriceCheckScheduler"):
        interval = derive_interval(["08:00", "12:00"])

    assert interval == timedelta(hours=4)
    assert "unevenly spaced" in caplog.text


def make_settings(**overrides):
    values = dict(origin_airport="FRA", request_delay_seconds=0, retention_days=90, scheduler_times=SLOTS)
    values.update(overrides)
    return Settings(**values)


async def test_run_once_sweeps_and_cleans_up(db, session_factory, clock, destinations):
    TravelDateService(db, clock=clock).create(
        "Easter", date(2026, 4, 18), date(2026, 4, 21), [destinations["PMI"].id, destinations["ARN"].id]
    )
    provider = StubProvider()
    scheduler = PriceCheckScheduler(make_settings(), session_factory=session_factory, provider=provider, clock=clock)

    assert await scheduler.run_once() == 2
    assert db.query(PriceCheck).count() == 2


async def test_run_once_logs_and_swallows_failures(session_factory, clock, caplog):
    scheduler = PriceCheckScheduler(make_settings(), session_factory=session_factory, provider=StubProvider(), clock=clock)
    scheduler._session_factory = lambda: _BrokenSession(session_factory())

    with caplog.at_level(logging.ERROR, logger="PriceCheckScheduler"):
        assert await scheduler.run_once() is None

    assert "Error occurred during scheduled price check" in caplog.text


class _BrokenSession:
    """Session proxy whose queries fail."""

    def __init__(self, session):
        self._session = session

    def query(self, *args, **kwargs):
        raise RuntimeError("database is down")

    def close(self):
        self._session.close()


async def test_run_waits_for_slot_then_loops_at_interval(session_factory, clock):
    # clock is 2026-03-01 12:00 UTC = 13:00 Berlin, next slot 20:00 Berlin
    delays = []
    runs = []

    async def fake_sleep(seconds):
        delays.append(seconds)
        if len(delays) == 3:
            raise asyncio.CancelledError()

    scheduler = PriceCheckScheduler(
        make_settings(), session_factory=session_factory, provider=StubProvider(), clock=clock, sleep=fake_sleep
    )

    async def fake_run_once():
        runs.append(clock.now)
        return 0

    scheduler.run_once = fake_run_once

    with pytest.raises(asyncio.CancelledError):
        await scheduler.run()

    assert delays == [7 * 3600, 12 * 3600, 12 * 3600]
    assert len(runs) == 2


async def test_start_and_stop(session_factory, clock):
    scheduler = PriceCheckScheduler(make_settings(), session_factory=session_factory, provider=StubProvider(), clock=clock)

    scheduler.start()
    await asyncio.sleep(0)
    assert scheduler.is_running

    await scheduler.stop()
    assert not scheduler.is_running


async def test_stop_logs_a_loop_that_already_failed(session_factory, clock, caplog):
    async def failing_sleep(seconds):
        raise RuntimeError("timer broke")

    scheduler = PriceCheckScheduler(
        make_settings(), session_factory=session_factory, provider=StubProvider(), clock=clock, sleep=failing_sleep
    )
    task = scheduler.start()
    await asyncio.sleep(0)
    assert task.done()

    with caplog.at_level(logging.ERROR, logger="PriceCheckScheduler"):
        await scheduler.stop()

    assert "had already failed: timer broke" in caplog.text
    assert not scheduler.is_running
