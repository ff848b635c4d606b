"""
Recurring price check scheduler.

Waits for the next configured wall-clock slot (08:00 and 20:00 Berlin time
by default), then sweeps every upcoming route at a fixed interval. Each run
uses its own database session and finishes with retention cleanup.

Run standalone with ``python -m price_collector.scheduler``.
"""
import asyncio
import logging
from datetime import datetime, time, timedelta
from typing import Awaitable, Callable, List, Optional, Sequence

import pytz
from sqlalchemy.orm import sessionmaker

from flight_tracker.clock import utcnow
from flight_tracker.config import Settings, settings as default_settings
from flight_tracker.database import SessionLocal, init_db
from flight_tracker.services.configuration_service import ConfigurationService
from flight_tracker.services.flight_search_service import FlightSearchService
from flight_tracker.services.price_history_service import PriceHistoryService
from price_collector.providers import FlightProviderInterface, build_provider

logger = logging.getLogger("PriceCheckScheduler")


def parse_slot_times(times: Sequence[str]) -> List[time]:
    """Parse ``HH:MM`` strings into sorted, de-duplicated slot times."""
    slots = set()
    for value in times:
        try:
            hour, minute = (int(part) for part in value.strip().split(":"))
            slots.add(time(hour, minute))
        except (AttributeError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid scheduler time '{value}', expected HH:MM") from e
    if not slots:
        raise ValueError("At least one scheduler time is required")
    return sorted(slots)


def next_scheduled_time(now: datetime, times: Sequence[str], tz) -> datetime:
    """
    Next slot strictly after ``now`` in time zone ``tz``; else the first slot tomorrow.

    ``now`` may be naive (taken as UTC) or aware. The result is aware, in ``tz``.
    """
    if isinstance(tz, str):
        tz = pytz.timezone(tz)
    if now.tzinfo is None:
        now = pytz.UTC.localize(now)
    local_now = now.astimezone(tz)
    slots = parse_slot_times(times)

    for slot in slots:
        candidate = tz.localize(datetime.combine(local_now.date(), slot))
        if candidate > local_now:
            return candidate

    tomorrow = local_now.date() + timedelta(days=1)
    return tz.localize(datetime.combine(tomorrow, slots[0]))


def derive_interval(times: Sequence[str], override_hours: Optional[float] = None) -> timedelta:
    """Spacing between runs: the override if given, else the gap between the first two slots."""
    if override_hours:
        return timedelta(hours=override_hours)

    slots = parse_slot_times(times)
    if len(slots) == 1:
        return timedelta(hours=24)

    minutes = [s.hour * 60 + s.minute for s in slots]
    gaps = [b - a for a, b in zip(minutes, minutes[1:])]
    gaps.append(24 * 60 - minutes[-1] + minutes[0])
    if len(set(gaps)) > 1:
        logger.warning(
            f"Scheduler times {[s.strftime('%H:%M') for s in slots]} are unevenly spaced; "
            f"runs will drift to a fixed {gaps[0]} minute interval"
        )
    return timedelta(minutes=gaps[0])


class PriceCheckScheduler:
    """Long-lived asyncio task that runs the price check sweep on a wall-clock schedule."""

    def __init__(
        self,
        app_settings: Settings = default_settings,
        session_factory: sessionmaker = SessionLocal,
        provider: Optional[FlightProviderInterface] = None,
        clock: Callable[[], datetime] = utcnow,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._settings = app_settings
        self._session_factory = session_factory
        self._provider = provider or build_provider(app_settings)
        self._clock = clock
        self._sleep = sleep
        self._timezone = pytz.timezone(app_settings.scheduler_timezone)
        self._interval = derive_interval(app_settings.scheduler_times, app_settings.scheduler_interval_hours)
        self._task: Optional[asyncio.Task] = None

    @property
    def interval(self) -> timedelta:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def seconds_until_next_run(self) -> float:
        now = pytz.UTC.localize(self._clock())
        next_run = next_scheduled_time(now, self._settings.scheduler_times, self._timezone)
        delay = (next_run - now).total_seconds()

        hours, remainder = divmod(int(delay), 3600)
        logger.info(
            f"Waiting {hours}h {remainder // 60}m until next price check at "
            f"{next_run.strftime('%Y-%m-%d %H:%M %Z')}"
        )
        return max(delay, 0.0)

    async def run_once(self) -> Optional[int]:
        """One sweep plus retention cleanup. Errors are logged, never raised."""
        logger.info(f"Starting scheduled price check at {self._clock().isoformat()}")
        db = self._session_factory()
        try:
            search_service = FlightSearchService(
                db,
                self._provider,
                request_delay_seconds=self._settings.request_delay_seconds,
                clock=self._clock,
            )
            success_count = await search_service.check_all_routes(self._settings.origin_airport)
            logger.info(f"Price check complete: {success_count} routes successfully checked")

            history_service = PriceHistoryService(db, clock=self._clock)
            history_service.cleanup_old_records(self._settings.retention_days)
            history_service.reconcile_orphans()
            return success_count
        except Exception as e:
            logger.error(f"Error occurred during scheduled price check: {e}")
            return None
        finally:
            db.close()

    async def run(self) -> None:
        logger.info("Price check scheduler started")
        try:
            await self._sleep(self.seconds_until_next_run())
            while True:
                await self.run_once()
                await self._sleep(self._interval.total_seconds())
        finally:
            logger.info("Price check scheduler stopped")

    def start(self) -> asyncio.Task:
        if not self.is_running:
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        """Cancel the loop. A sweep in progress is abandoned at its next await."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Price check scheduler had already failed: {e}")
        finally:
            self._task = None


def sync_configuration(app_settings: Settings = default_settings) -> None:
    """Create tables and load configured destinations and target dates."""
    init_db()
    db = SessionLocal()
    try:
        ConfigurationService(db, app_settings).initialize_all()
    finally:
        db.close()


async def main():
    sync_configuration()
    scheduler = PriceCheckScheduler()
    await scheduler.run()


if __name__ == "__main__":
    logging.basicConfig(
        level=default_settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Scheduler interrupted")
