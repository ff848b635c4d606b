"""
Booking.com flight provider: live quotes via RapidAPI.

Requires FLIGHT_PROVIDER_API_KEY. A non-2xx answer is reported as an
unsuccessful search; network failures raise ProviderError.
"""
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import httpx

from flight_tracker.errors import ProviderError
from flight_tracker.schemas.flight_search_schema import FlightOption, FlightSearchResult
from price_collector.providers.base import FlightProviderInterface

logger = logging.getLogger("Provider.BookingCom")

DEFAULT_BOOKING_URL = "https://www.booking.com/flights/"


class BookingComProvider(FlightProviderInterface):
    """
    Round-trip economy search for one adult, priced in EUR.

    ``transport`` lets callers swap the HTTP transport (e.g. httpx.MockTransport).
    """

    def __init__(
        self,
        api_key: str,
        api_host: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self._api_host = api_host
        self._timeout = timeout
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return "bookingcom"

    async def search_flights(
        self, origin: str, destination: str, outbound_date: date, return_date: date
    ) -> FlightSearchResult:
        route = dict(origin=origin, destination=destination, outbound_date=outbound_date, return_date=return_date)
        logger.info(f"[BookingCom] Searching flights: {origin} -> {destination}")

        params = {
            "fromId": origin,
            "toId": destination,
            "departDate": outbound_date.isoformat(),
            "returnDate": return_date.isoformat(),
            "adults": 1,
            "cabinClass": "ECONOMY",
            "currency": "EUR",
        }
        headers = {
            "X-RapidAPI-Key": self._api_key,
            "X-RapidAPI-Host": self._api_host,
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(
                    f"https://{self._api_host}/v1/flights/search",
                    params=params,
                    headers=headers,
                )
        except httpx.HTTPError as e:
            logger.error(f"[BookingCom] HTTP error for {origin}-{destination}: {e}")
            raise ProviderError(f"Booking.com request failed for {origin}-{destination}: {e}") from e

        if response.is_error:
            logger.error(f"[BookingCom] API request failed: {response.status_code} - {response.text}")
            return FlightSearchResult.failure(f"API returned {response.status_code}: {response.text}", **route)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(f"Booking.com returned invalid JSON for {origin}-{destination}") from e

        raw_flights = ((data or {}).get("data") or {}).get("flights") or []
        if not raw_flights:
            logger.warning(f"[BookingCom] No flights found for {origin}-{destination}")
            return FlightSearchResult(success=True, flights=[], **route)

        flights = [f for f in (self._parse_flight(raw) for raw in raw_flights) if f is not None]
        flights.sort(key=lambda f: f.price)

        logger.info(f"[BookingCom] Found {len(flights)} flights for {origin}-{destination}")
        return FlightSearchResult(success=True, flights=flights, **route)

    def _parse_flight(self, flight: Dict[str, Any]) -> Optional[FlightOption]:
        """Normalize one API flight to a FlightOption. Returns None if unusable."""
        try:
            legs: List[Dict[str, Any]] = flight.get("legs") or []
            if not legs:
                return None
            outbound_leg = legs[0]

            price_info = flight.get("price") or {}
            if price_info.get("total") is None:
                return None

            carriers = outbound_leg.get("carriers") or []
            return FlightOption(
                price=Decimal(str(price_info["total"])),
                currency=price_info.get("currency") or "EUR",
                departure_time=datetime.fromisoformat(outbound_leg["departureTime"]),
                arrival_time=datetime.fromisoformat(outbound_leg["arrivalTime"]),
                airline=carriers[0] if carriers else "Unknown",
                stops=outbound_leg.get("stops") or 0,
                booking_url=flight.get("deepLink") or DEFAULT_BOOKING_URL,
            )
        except (AttributeError, KeyError, TypeError, ValueError, InvalidOperation) as e:
            logger.warning(f"[BookingCom] Skipping unparseable flight: {e}")
            return None
