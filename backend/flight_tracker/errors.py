"""
Error taxonomy shared by the catalog, the price history store and the
price check orchestrator.
"""


class FlightTrackerError(Exception):
    """Base class for all domain errors."""


class ValidationError(FlightTrackerError):
    """Bad input to a catalog mutation. Raised before anything is written."""


class NotFoundError(FlightTrackerError):
    """Referenced entity is missing or in the wrong lifecycle state."""


class ProviderError(FlightTrackerError):
    """Transport or parse failure from a flight quote source."""


class PersistenceError(FlightTrackerError):
    """The storage layer failed; the current unit of work was rolled back."""
