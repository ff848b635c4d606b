"""
Abstract base class for all flight quote providers.
Every provider returns a FlightSearchResult so the price check
orchestration stays provider-agnostic.
"""
from abc import ABC, abstractmethod
from datetime import date

from flight_tracker.schemas.flight_search_schema import FlightSearchResult


class FlightProviderInterface(ABC):
    """
    Contract that every flight quote provider must satisfy.

    All providers MUST:
      - Quote round trips for the requested outbound/return dates
      - Report provider-side failures as ``success=False`` results
      - Raise ProviderError only for transport-level failures
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique identifier for this provider (e.g. 'mock', 'bookingcom')."""
        ...

    @abstractmethod
    async def search_flights(
        self, origin: str, destination: str, outbound_date: date, return_date: date
    ) -> FlightSearchResult:
        """
        Search round-trip flight options for one route.

        Args:
            origin: IATA airport code (e.g. 'FRA')
            destination: IATA airport code (e.g. 'PMI')
            outbound_date: departure date
            return_date: return date, after outbound_date

        Returns:
            FlightSearchResult; ``flights`` may be empty on success.
        """
        ...
