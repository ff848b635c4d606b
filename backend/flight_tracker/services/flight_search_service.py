"""
Price check orchestration.

Decides which routes to check, calls the flight provider, keeps the cheapest
option and appends it to the price history. Batch operations are partial-
failure tolerant: one bad route is logged and skipped, never fatal.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from flight_tracker.clock import utcnow
from flight_tracker.database import unit_of_work
from flight_tracker.errors import NotFoundError, ProviderError
from flight_tracker.models.price_check import PriceCheck
from flight_tracker.repositories.destination_repository import DestinationRepository
from flight_tracker.repositories.price_check_repository import PriceCheckRepository
from flight_tracker.repositories.target_date_repository import TargetDateRepository
from flight_tracker.schemas.flight_search_schema import FlightOption
from price_collector.providers.base import FlightProviderInterface

logger = logging.getLogger("FlightSearchService")

DEFAULT_REQUEST_DELAY_SECONDS = 2.0
DEFAULT_MAX_AGE_HOURS = 6


@dataclass
class OnDemandCheckResult:
    cached_count: int = 0
    fetched_count: int = 0
    results: List[PriceCheck] = field(default_factory=list)


def select_cheapest(options: List[FlightOption]) -> FlightOption:
    """Cheapest option; on equal prices the one the provider listed first wins."""
    return min(options, key=lambda option: option.price)


class FlightSearchService:

    def __init__(
        self,
        db: Session,
        provider: FlightProviderInterface,
        request_delay_seconds: float = DEFAULT_REQUEST_DELAY_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._db = db
        self._provider = provider
        self._request_delay = request_delay_seconds
        self._clock = clock
        self._destinations = DestinationRepository(db)
        self._target_dates = TargetDateRepository(db)
        self._price_checks = PriceCheckRepository(db)
        self._live_calls = 0

    def get_latest_prices(self, target_date_id: int) -> List[PriceCheck]:
        """Latest stored price per destination; no provider call."""
        return self._price_checks.get_latest_for_target_date(target_date_id)

    async def fetch_and_save(
        self,
        origin: str,
        destination_code: str,
        outbound_date: date,
        return_date: date,
    ) -> Optional[PriceCheck]:
        """
        Search one route and store its cheapest option.

        Returns:
            The persisted PriceCheck, or None when the provider had nothing to
            offer or the route cannot be attributed to a tracked date range
            and destination.

        Raises:
            ProviderError: the provider call failed at transport level.
            PersistenceError: the row could not be stored.
        """
        logger.info(f"Searching flights: {origin} -> {destination_code} ({outbound_date} to {return_date})")

        try:
            search_result = await self._provider.search_flights(origin, destination_code, outbound_date, return_date)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(
                f"[{self._provider.provider_name}] search failed for {origin}-{destination_code}: {e}"
            ) from e
        fetched_at = self._clock()

        if not search_result.success or not search_result.flights:
            logger.warning(
                f"No flights found for {origin} -> {destination_code}: "
                f"{search_result.error_message or 'No flights available'}"
            )
            return None

        cheapest = select_cheapest(search_result.flights)
        logger.info(f"Found cheapest flight: {cheapest.airline} at {cheapest.price} {cheapest.currency}")

        destination = self._destinations.get_by_airport_code(destination_code)
        if destination is None:
            logger.warning(f"Destination {destination_code} not found in database")
            return None

        target_date = self._target_dates.get_by_dates(outbound_date, return_date)
        if target_date is None:
            logger.warning(f"Target date range not found in database: {outbound_date} - {return_date}")
            return None

        price_check = PriceCheck(
            target_date_id=target_date.id,
            destination_id=destination.id,
            check_timestamp=fetched_at,
            price=round(cheapest.price, 2),
            currency=cheapest.currency,
            departure_time=cheapest.departure_time.time(),
            arrival_time=cheapest.arrival_time.time(),
            airline=cheapest.airline,
            stops=cheapest.stops,
            booking_url=cheapest.booking_url,
        )
        with unit_of_work(self._db, f"saving price check for {origin}-{destination_code}"):
            self._price_checks.add(price_check)

        logger.info(f"Saved price check: {price_check.id} for {destination.name}")
        return price_check

    async def check_all_routes(self, origin: str) -> int:
        """
        Fetch and save prices for every destination of every upcoming date range.

        Returns:
            Number of routes for which a price check was saved.
        """
        success_count = 0
        self._live_calls = 0

        target_dates = self._target_dates.get_upcoming(self._clock().date())
        logger.info(f"Checking {len(target_dates)} upcoming travel dates from {origin}")

        for target_date in target_dates:
            destinations = self._target_dates.get_destinations(target_date.id)
            if not destinations:
                logger.warning(f"Travel date '{target_date.name}' (ID: {target_date.id}) has no destinations. Skipping.")
                continue

            for destination in destinations:
                try:
                    result = await self._throttled_fetch(origin, destination.airport_code, target_date)
                    if result is not None:
                        success_count += 1
                except Exception as e:
                    logger.error(
                        f"Failed to search route: {origin} -> {destination.airport_code} "
                        f"for {target_date.name}: {e}"
                    )

        logger.info(f"Completed searching all routes. Success: {success_count}")
        return success_count

    async def check_date_range_on_demand(
        self,
        origin: str,
        target_date_id: int,
        max_age_hours: float = DEFAULT_MAX_AGE_HOURS,
    ) -> OnDemandCheckResult:
        """
        Refresh one date range, reusing any price checked within ``max_age_hours``.

        Raises:
            NotFoundError: the date range is missing or soft-deleted.
        """
        target_date = self._target_dates.get_by_id(target_date_id)
        if target_date is None or not target_date.is_active:
            raise NotFoundError(f"Travel date {target_date_id} not found or has been deleted")

        outcome = OnDemandCheckResult()
        self._live_calls = 0
        now = self._clock()

        for destination in self._target_dates.get_destinations(target_date_id):
            cached = self._price_checks.get_recent(target_date_id, destination.id, max_age_hours, now)
            if cached is not None:
                outcome.cached_count += 1
                outcome.results.append(cached)
                continue

            try:
                result = await self._throttled_fetch(origin, destination.airport_code, target_date)
            except Exception as e:
                logger.error(f"On-demand check failed for {origin} -> {destination.airport_code}: {e}")
                continue

            if result is not None:
                outcome.fetched_count += 1
                outcome.results.append(result)

        logger.info(
            f"On-demand check for travel date {target_date_id}: "
            f"{outcome.cached_count} cached, {outcome.fetched_count} fetched"
        )
        return outcome

    async def _throttled_fetch(self, origin: str, destination_code: str, target_date) -> Optional[PriceCheck]:
        # Courtesy delay between successive live provider calls, never before the first one
        if self._live_calls > 0 and self._request_delay > 0:
            await asyncio.sleep(self._request_delay)
        self._live_calls += 1
        return await self.fetch_and_save(origin, destination_code, target_date.outbound_date, target_date.return_date)
