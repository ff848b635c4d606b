from datetime import date, datetime
from typing import Iterable, List, Optional, Set, Tuple

from sqlalchemy.orm import Session

from flight_tracker.models.destination import Destination
from flight_tracker.models.target_date import TargetDate, TargetDateDestination
from flight_tracker.repositories.base import TargetDateRepositoryInterface


class TargetDateRepository(TargetDateRepositoryInterface):

    def __init__(self, db: Session):
        self._db = db

    def get_by_id(self, target_date_id: int) -> Optional[TargetDate]:
        return self._db.get(TargetDate, target_date_id)

    def get_by_dates(self, outbound_date: date, return_date: date) -> Optional[TargetDate]:
        return (
            self._db.query(TargetDate)
            .filter(
                TargetDate.is_deleted == False,  # noqa: E712
                TargetDate.outbound_date == outbound_date,
                TargetDate.return_date == return_date,
            )
            .first()
        )

    def get_active(self) -> List[TargetDate]:
        return (
            self._db.query(TargetDate)
            .filter(TargetDate.is_deleted == False)  # noqa: E712
            .order_by(TargetDate.outbound_date.asc(), TargetDate.id.asc())
            .all()
        )

    def get_deleted(self) -> List[TargetDate]:
        return (
            self._db.query(TargetDate)
            .filter(TargetDate.is_deleted == True)  # noqa: E712
            .order_by(TargetDate.deleted_at.desc(), TargetDate.id.desc())
            .all()
        )

    def get_all_including_deleted(self) -> List[TargetDate]:
        return self._db.query(TargetDate).order_by(TargetDate.outbound_date.asc(), TargetDate.id.asc()).all()

    def get_upcoming(self, today: date) -> List[TargetDate]:
        return (
            self._db.query(TargetDate)
            .filter(TargetDate.is_deleted == False, TargetDate.outbound_date >= today)  # noqa: E712
            .order_by(TargetDate.outbound_date.asc(), TargetDate.id.asc())
            .all()
        )

    def add(self, target_date: TargetDate) -> TargetDate:
        self._db.add(target_date)
        self._db.flush()
        return target_date

    def get_destinations(self, target_date_id: int) -> List[Destination]:
        return (
            self._db.query(Destination)
            .join(TargetDateDestination, TargetDateDestination.destination_id == Destination.id)
            .filter(TargetDateDestination.target_date_id == target_date_id)
            .order_by(Destination.name.asc())
            .all()
        )

    def replace_destinations(
        self, target_date_id: int, destination_ids: Iterable[int], now: datetime
    ) -> Tuple[Set[int], Set[int]]:
        wanted = set(destination_ids)
        links = (
            self._db.query(TargetDateDestination)
            .filter(TargetDateDestination.target_date_id == target_date_id)
            .all()
        )
        current = {link.destination_id for link in links}

        added = wanted - current
        removed = current - wanted

        # Only the difference is touched; unchanged pairs keep their row and created_at
        for link in links:
            if link.destination_id in removed:
                self._db.delete(link)
        for destination_id in sorted(added):
            self._db.add(TargetDateDestination(
                target_date_id=target_date_id,
                destination_id=destination_id,
                created_at=now,
            ))
        self._db.flush()
        return added, removed
