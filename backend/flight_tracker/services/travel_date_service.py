"""
Route catalog: tracked date ranges, their lifecycle and destination associations.

Every mutation is one unit of work. Validation happens before anything is
written; storage failures roll the whole unit back.
"""
import logging
from datetime import date, datetime
from typing import Callable, Iterable, List, Optional

from sqlalchemy.orm import Session

from flight_tracker.clock import utcnow
from flight_tracker.database import unit_of_work
from flight_tracker.errors import NotFoundError, ValidationError
from flight_tracker.models.destination import Destination
from flight_tracker.models.target_date import TargetDate
from flight_tracker.repositories.destination_repository import DestinationRepository
from flight_tracker.repositories.price_check_repository import PriceCheckRepository
from flight_tracker.repositories.target_date_repository import TargetDateRepository

logger = logging.getLogger("TravelDateService")


class TravelDateService:

    def __init__(
        self,
        db: Session,
        target_dates: Optional[TargetDateRepository] = None,
        destinations: Optional[DestinationRepository] = None,
        price_checks: Optional[PriceCheckRepository] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._db = db
        self._target_dates = target_dates or TargetDateRepository(db)
        self._destinations = destinations or DestinationRepository(db)
        self._price_checks = price_checks or PriceCheckRepository(db)
        self._clock = clock

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, target_date_id: int) -> TargetDate:
        target_date = self._target_dates.get_by_id(target_date_id)
        if target_date is None:
            raise NotFoundError(f"Travel date {target_date_id} not found")
        return target_date

    def list_active(self) -> List[TargetDate]:
        return self._target_dates.get_active()

    def list_deleted(self) -> List[TargetDate]:
        return self._target_dates.get_deleted()

    def list_all(self) -> List[TargetDate]:
        return self._target_dates.get_all_including_deleted()

    def list_upcoming(self, today: Optional[date] = None) -> List[TargetDate]:
        return self._target_dates.get_upcoming(today or self._clock().date())

    def get_destinations(self, target_date_id: int) -> List[Destination]:
        return self._target_dates.get_destinations(target_date_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(
        self,
        name: str,
        outbound_date: date,
        return_date: date,
        destination_ids: Iterable[int],
    ) -> TargetDate:
        dest_ids = set(destination_ids)
        clean_name = self._validate(name, outbound_date, return_date, dest_ids)
        self._ensure_dates_free(outbound_date, return_date)

        now = self._clock()
        target_date = TargetDate(
            name=clean_name,
            outbound_date=outbound_date,
            return_date=return_date,
            is_deleted=False,
            deleted_at=None,
            created_at=now,
            updated_at=None,
        )

        with unit_of_work(self._db, f"creating travel date '{clean_name}'"):
            self._target_dates.add(target_date)
            self._target_dates.replace_destinations(target_date.id, dest_ids, now)

        logger.info(f"Created travel date '{target_date.name}' (ID: {target_date.id}) with {len(dest_ids)} destinations")
        return target_date

    def update(
        self,
        target_date_id: int,
        name: str,
        outbound_date: date,
        return_date: date,
        destination_ids: Iterable[int],
    ) -> TargetDate:
        new_dest_ids = set(destination_ids)
        clean_name = self._validate(name, outbound_date, return_date, new_dest_ids)

        target_date = self._target_dates.get_by_id(target_date_id)
        if target_date is None or not target_date.is_active:
            logger.warning(f"Failed to update travel date {target_date_id} - missing or deleted")
            raise NotFoundError(f"Travel date {target_date_id} not found or has been deleted")
        self._ensure_dates_free(outbound_date, return_date, ignore_id=target_date_id)

        current_ids = {d.id for d in self._target_dates.get_destinations(target_date_id)}
        removed_ids = current_ids - new_dest_ids
        now = self._clock()

        with unit_of_work(self._db, f"updating travel date {target_date_id}"):
            # Prices of untracked destinations must not resurface if they are re-added later
            if removed_ids:
                deleted_count = self._price_checks.delete_orphaned(target_date_id, new_dest_ids)
                logger.info(
                    f"Invalidated {deleted_count} price checks for removed destinations "
                    f"{sorted(removed_ids)} on travel date {target_date_id}"
                )

            target_date.name = clean_name
            target_date.outbound_date = outbound_date
            target_date.return_date = return_date
            target_date.updated_at = now
            self._target_dates.replace_destinations(target_date_id, new_dest_ids, now)

        logger.info(f"Updated travel date '{clean_name}' (ID: {target_date_id}) with {len(new_dest_ids)} destinations")
        return target_date

    def soft_delete(self, target_date_id: int) -> None:
        target_date = self._target_dates.get_by_id(target_date_id)
        if target_date is None:
            raise NotFoundError(f"Travel date {target_date_id} not found")

        with unit_of_work(self._db, f"deleting travel date {target_date_id}"):
            target_date.soft_delete(self._clock())

        logger.info(f"Soft deleted travel date {target_date_id}")

    def restore(self, target_date_id: int) -> None:
        target_date = self._target_dates.get_by_id(target_date_id)
        if target_date is None or target_date.is_active:
            raise NotFoundError(f"Travel date {target_date_id} not found or not deleted")
        self._ensure_dates_free(target_date.outbound_date, target_date.return_date, ignore_id=target_date_id)

        with unit_of_work(self._db, f"restoring travel date {target_date_id}"):
            target_date.restore()

        logger.info(f"Restored travel date {target_date_id}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _validate(self, name: str, outbound_date: date, return_date: date, destination_ids: set) -> str:
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValidationError("Name is required")
        if return_date <= outbound_date:
            raise ValidationError("Return date must be after outbound date")
        if not destination_ids:
            raise ValidationError("At least one destination is required")

        unknown = destination_ids - self._destinations.get_existing_ids(destination_ids)
        if unknown:
            raise ValidationError(f"Unknown destination ids: {sorted(unknown)}")
        return clean_name

    def _ensure_dates_free(self, outbound_date: date, return_date: date, ignore_id: Optional[int] = None):
        clash = self._target_dates.get_by_dates(outbound_date, return_date)
        if clash is not None and clash.id != ignore_id:
            raise ValidationError(
                f"An active travel date already covers {outbound_date} - {return_date}: '{clash.name}'"
            )
