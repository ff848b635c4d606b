import logging

from fastapi import HTTPException

from flight_tracker.errors import (
    FlightTrackerError,
    NotFoundError,
    PersistenceError,
    ProviderError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    ValidationError: 400,
    NotFoundError: 404,
    ProviderError: 502,
    PersistenceError: 500,
}


def to_http_exception(error: FlightTrackerError) -> HTTPException:
    """Translate a domain error into the matching HTTP status."""
    for error_type, status_code in STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            break
    else:
        status_code = 500

    if status_code >= 500:
        logger.error(f"Request failed: {error}")
        # Storage details stay in the log
        detail = "Internal server error." if isinstance(error, PersistenceError) else str(error)
    else:
        detail = str(error)
    return HTTPException(status_code=status_code, detail=detail)
