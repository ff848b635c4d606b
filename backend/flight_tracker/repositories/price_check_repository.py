from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from flight_tracker.models.price_check import PriceCheck
from flight_tracker.repositories.base import PriceCheckRepositoryInterface


class PriceCheckRepository(PriceCheckRepositoryInterface):
    """Append-only price check log. Rows are inserted and deleted, never updated."""

    def __init__(self, db: Session):
        self._db = db

    def _pair_query(self, target_date_id: int, destination_id: int):
        return self._db.query(PriceCheck).filter(
            PriceCheck.target_date_id == target_date_id,
            PriceCheck.destination_id == destination_id,
        )

    def add(self, price_check: PriceCheck) -> PriceCheck:
        self._db.add(price_check)
        self._db.flush()
        return price_check

    def get_latest(self, target_date_id: int, destination_id: int) -> Optional[PriceCheck]:
        return (
            self._pair_query(target_date_id, destination_id)
            .order_by(PriceCheck.check_timestamp.desc(), PriceCheck.id.desc())
            .first()
        )

    def get_latest_for_target_date(self, target_date_id: int) -> List[PriceCheck]:
        newest = (
            self._db.query(
                PriceCheck.destination_id.label("destination_id"),
                func.max(PriceCheck.check_timestamp).label("max_ts"),
            )
            .filter(PriceCheck.target_date_id == target_date_id)
            .group_by(PriceCheck.destination_id)
            .subquery()
        )
        rows = (
            self._db.query(PriceCheck)
            .join(
                newest,
                (PriceCheck.destination_id == newest.c.destination_id)
                & (PriceCheck.check_timestamp == newest.c.max_ts),
            )
            .filter(PriceCheck.target_date_id == target_date_id)
            .order_by(PriceCheck.destination_id.asc(), PriceCheck.id.desc())
            .all()
        )

        # Identical max timestamps yield several rows per destination; keep the latest insert
        latest = {}
        for row in rows:
            latest.setdefault(row.destination_id, row)
        return list(latest.values())

    def get_recent(
        self, target_date_id: int, destination_id: int, max_age_hours: float, now: datetime
    ) -> Optional[PriceCheck]:
        cutoff = now - timedelta(hours=max_age_hours)
        return (
            self._pair_query(target_date_id, destination_id)
            .filter(PriceCheck.check_timestamp >= cutoff)
            .order_by(PriceCheck.check_timestamp.desc(), PriceCheck.id.desc())
            .first()
        )

    def get_history(self, target_date_id: int, destination_id: int, since: datetime) -> List[PriceCheck]:
        return (
            self._pair_query(target_date_id, destination_id)
            .filter(PriceCheck.check_timestamp >= since)
            .order_by(PriceCheck.check_timestamp.asc(), PriceCheck.id.asc())
            .all()
        )

    def delete_older_than(self, cutoff: datetime) -> int:
        return (
            self._db.query(PriceCheck)
            .filter(PriceCheck.check_timestamp < cutoff)
            .delete(synchronize_session="fetch")
        )

    def delete_orphaned(self, target_date_id: int, keep_destination_ids: Iterable[int]) -> int:
        keep = set(keep_destination_ids)
        query = self._db.query(PriceCheck).filter(PriceCheck.target_date_id == target_date_id)
        if keep:
            query = query.filter(PriceCheck.destination_id.notin_(keep))
        return query.delete(synchronize_session="fetch")
