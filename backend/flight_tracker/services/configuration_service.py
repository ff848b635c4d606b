import logging
from datetime import date, datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from flight_tracker.clock import utcnow
from flight_tracker.config import DestinationConfig, Settings, TargetDateConfig, settings as default_settings
from flight_tracker.database import unit_of_work
from flight_tracker.models.destination import Destination
from flight_tracker.models.target_date import TargetDate
from flight_tracker.repositories.destination_repository import DestinationRepository
from flight_tracker.repositories.target_date_repository import TargetDateRepository

logger = logging.getLogger("ConfigurationService")


def _parse_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        return None


class ConfigurationService:
    """
    Syncs the configured destinations and target dates into the database at startup.
    Creates what is missing and updates names that changed; never deletes.
    """

    def __init__(self, db: Session, app_settings: Settings = default_settings, clock: Callable[[], datetime] = utcnow):
        self._db = db
        self._settings = app_settings
        self._clock = clock
        self._destinations = DestinationRepository(db)
        self._target_dates = TargetDateRepository(db)

    @property
    def origin_airport(self) -> str:
        return self._settings.origin_airport

    @property
    def destinations(self) -> List[DestinationConfig]:
        return self._settings.destinations

    @property
    def target_dates(self) -> List[TargetDateConfig]:
        return self._settings.target_dates

    def initialize_destinations(self) -> None:
        logger.info("Initializing destinations from configuration...")

        with unit_of_work(self._db, "initializing destinations"):
            for dest_config in self.destinations:
                code = dest_config.code.upper()
                existing = self._destinations.get_by_airport_code(code)
                if existing is None:
                    self._destinations.add(Destination(airport_code=code, name=dest_config.name))
                    logger.info(f"Created destination: {code} - {dest_config.name}")
                elif existing.name != dest_config.name:
                    existing.name = dest_config.name
                    logger.info(f"Updated destination: {code} - {dest_config.name}")

        logger.info("Destinations initialized successfully")

    def initialize_target_dates(self) -> None:
        logger.info("Initializing target dates from configuration...")
        now = self._clock()

        with unit_of_work(self._db, "initializing target dates"):
            configured_codes = [d.code.upper() for d in self.destinations]
            destination_ids = {
                dest.id for dest in (self._destinations.get_by_airport_code(c) for c in configured_codes) if dest
            }

            for date_config in self.target_dates:
                outbound_date = _parse_date(date_config.outbound)
                if outbound_date is None:
                    logger.warning(f"Invalid outbound date format: {date_config.outbound}")
                    continue
                return_date = _parse_date(date_config.return_date)
                if return_date is None:
                    logger.warning(f"Invalid return date format: {date_config.return_date}")
                    continue
                if return_date <= outbound_date:
                    logger.warning(f"Skipping '{date_config.name}': return date {return_date} is not after {outbound_date}")
                    continue

                existing = self._target_dates.get_by_dates(outbound_date, return_date)
                if existing is None:
                    target_date = self._target_dates.add(TargetDate(
                        name=date_config.name,
                        outbound_date=outbound_date,
                        return_date=return_date,
                        is_deleted=False,
                        created_at=now,
                    ))
                    # Configured date ranges track every configured destination
                    self._target_dates.replace_destinations(target_date.id, destination_ids, now)
                    logger.info(f"Created target date: {target_date.name} ({outbound_date} - {return_date})")
                elif existing.name != date_config.name:
                    existing.name = date_config.name
                    existing.updated_at = now
                    logger.info(f"Updated target date: {existing.name}")

        logger.info("Target dates initialized successfully")

    def initialize_all(self) -> None:
        self.initialize_destinations()
        self.initialize_target_dates()
