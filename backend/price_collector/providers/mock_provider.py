"""
Mock flight provider for development and demos.

Generates plausible round-trip quotes around a per-destination base price
so the whole pipeline runs without any API key.

Rules:
  - EUR only
  - 3-5 options per search, sorted cheapest first
  - First two options are direct
  - Booking links point to a Skyscanner search for the route
"""
import asyncio
import logging
import random
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import List, Optional

from flight_tracker.schemas.flight_search_schema import FlightOption, FlightSearchResult
from price_collector.providers.base import FlightProviderInterface

logger = logging.getLogger("Provider.Mock")

MOCK_AIRLINES = [
    "Lufthansa", "Ryanair", "Eurowings", "easyJet",
    "Vueling", "Air Europa", "Condor",
]

# Base prices (EUR) for destinations out of Frankfurt
BASE_PRICES = {
    "PMI": 89,   # Mallorca
    "ARN": 142,  # Stockholm
    "TFS": 156,  # Tenerife South
    "LPA": 149,  # Gran Canaria
}
DEFAULT_BASE_PRICE = 120

# Approximate flight durations in minutes
FLIGHT_DURATIONS = {
    "PMI": 135,
    "ARN": 150,
    "TFS": 270,
    "LPA": 270,
}
DEFAULT_DURATION = 180

SIMULATED_LATENCY_SECONDS = 0.5


class MockFlightProvider(FlightProviderInterface):
    """Random but route-aware quotes. Pass a seeded ``rng`` for reproducible output."""

    def __init__(self, latency_seconds: float = SIMULATED_LATENCY_SECONDS, rng: Optional[random.Random] = None):
        self._latency = latency_seconds
        self._rng = rng or random.Random()

    @property
    def provider_name(self) -> str:
        return "mock"

    async def search_flights(
        self, origin: str, destination: str, outbound_date: date, return_date: date
    ) -> FlightSearchResult:
        if self._latency > 0:
            await asyncio.sleep(self._latency)

        flights = self._generate_flights(origin, destination, outbound_date, return_date)
        logger.info(f"[Mock] Generated {len(flights)} options for {origin}-{destination} on {outbound_date}")

        return FlightSearchResult(
            success=True,
            flights=flights,
            origin=origin,
            destination=destination,
            outbound_date=outbound_date,
            return_date=return_date,
        )

    def _generate_flights(
        self, origin: str, destination: str, outbound_date: date, return_date: date
    ) -> List[FlightOption]:
        flight_count = self._rng.randint(3, 5)
        base_price = BASE_PRICES.get(destination, DEFAULT_BASE_PRICE)
        duration = FLIGHT_DURATIONS.get(destination, DEFAULT_DURATION)
        booking_url = self._booking_url(origin, destination, outbound_date, return_date)

        flights = []
        for i in range(flight_count):
            price = base_price + self._rng.randint(-30, 49)
            departure = datetime.combine(outbound_date, time(self._rng.randint(6, 20), self._rng.randint(0, 59)))

            flights.append(FlightOption(
                price=Decimal(price),
                currency="EUR",
                departure_time=departure,
                arrival_time=departure + timedelta(minutes=duration),
                airline=self._rng.choice(MOCK_AIRLINES),
                stops=self._stops(i, flight_count),
                booking_url=booking_url,
            ))

        return sorted(flights, key=lambda f: f.price)

    def _stops(self, index: int, total: int) -> int:
        if index < 2:
            return 0
        if index < total - 1:
            return 1
        return self._rng.randint(0, 1)

    @staticmethod
    def _booking_url(origin: str, destination: str, outbound_date: date, return_date: date) -> str:
        return (
            f"https://www.skyscanner.com/transport/flights/"
            f"{origin}/{destination}/{outbound_date.isoformat()}/{return_date.isoformat()}/"
        )
