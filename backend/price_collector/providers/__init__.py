import logging

from flight_tracker.config import Settings
from price_collector.providers.base import FlightProviderInterface
from price_collector.providers.bookingcom_provider import BookingComProvider
from price_collector.providers.mock_provider import MockFlightProvider

logger = logging.getLogger("ProviderFactory")


def build_provider(app_settings: Settings) -> FlightProviderInterface:
    """Instantiate the provider named by ``flight_provider_type``."""
    provider_type = (app_settings.flight_provider_type or "Mock").strip().lower()

    if provider_type == "bookingcom":
        if not app_settings.flight_provider_api_key:
            logger.warning("BookingCom provider selected but no API key configured. Falling back to Mock provider.")
            return MockFlightProvider()
        logger.info("Using BookingCom flight provider")
        return BookingComProvider(app_settings.flight_provider_api_key, app_settings.flight_provider_api_host)

    if provider_type != "mock":
        logger.warning(f"Unknown flight provider '{app_settings.flight_provider_type}'. Using Mock provider.")
    else:
        logger.info("Using Mock flight provider (development mode)")
    return MockFlightProvider()


__all__ = [
    "FlightProviderInterface",
    "MockFlightProvider",
    "BookingComProvider",
    "build_provider",
]
