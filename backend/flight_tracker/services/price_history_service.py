import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from flight_tracker.clock import utcnow
from flight_tracker.database import unit_of_work
from flight_tracker.models.price_check import PriceCheck
from flight_tracker.repositories.price_check_repository import PriceCheckRepository
from flight_tracker.repositories.target_date_repository import TargetDateRepository

logger = logging.getLogger("PriceHistoryService")

DEFAULT_RETENTION_DAYS = 90


class PriceHistoryService:
    """Price trends over stored checks, plus retention and orphan cleanup."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self._db = db
        self._clock = clock
        self._price_checks = PriceCheckRepository(db)
        self._target_dates = TargetDateRepository(db)

    def get_latest(self, target_date_id: int, destination_id: int) -> Optional[PriceCheck]:
        return self._price_checks.get_latest(target_date_id, destination_id)

    def get_price_history(self, target_date_id: int, destination_id: int, days_back: int = 30) -> List[PriceCheck]:
        since = self._clock() - timedelta(days=days_back)
        return self._price_checks.get_history(target_date_id, destination_id, since)

    def get_price_change(self, target_date_id: int, destination_id: int) -> Optional[Decimal]:
        """
        Percentage change of the latest price against the newest price that is
        at least 24 hours old (looking back one week). None without a baseline.
        """
        history = self.get_price_history(target_date_id, destination_id, days_back=7)
        if not history:
            return None

        latest_price = history[-1].price
        yesterday = self._clock() - timedelta(hours=24)
        baseline = [p for p in history if p.check_timestamp <= yesterday]
        if not baseline:
            return None

        old_price = baseline[-1].price
        if not old_price:
            return None
        return ((latest_price - old_price) / old_price * 100).quantize(Decimal("0.01"))

    def get_lowest_price(self, target_date_id: int, destination_id: int, days_back: int = 30) -> Optional[PriceCheck]:
        history = self.get_price_history(target_date_id, destination_id, days_back)
        if not history:
            return None
        return min(history, key=lambda p: p.price)

    def get_average_price(self, target_date_id: int, destination_id: int, days_back: int = 30) -> Optional[Decimal]:
        history = self.get_price_history(target_date_id, destination_id, days_back)
        if not history:
            return None
        total = sum((p.price for p in history), Decimal("0"))
        return (total / len(history)).quantize(Decimal("0.01"))

    def cleanup_old_records(self, days_to_keep: int = DEFAULT_RETENTION_DAYS) -> int:
        cutoff = self._clock() - timedelta(days=days_to_keep)
        logger.info(f"Cleaning up price checks older than {cutoff.date()}")

        with unit_of_work(self._db, "deleting old price checks"):
            deleted_count = self._price_checks.delete_older_than(cutoff)

        logger.info(f"Deleted {deleted_count} old price check records")
        return deleted_count

    def reconcile_orphans(self) -> int:
        """Purge price checks whose destination is no longer tracked for their date range."""
        total = 0
        with unit_of_work(self._db, "purging orphaned price checks"):
            for target_date in self._target_dates.get_all_including_deleted():
                keep_ids = {d.id for d in self._target_dates.get_destinations(target_date.id)}
                deleted_count = self._price_checks.delete_orphaned(target_date.id, keep_ids)
                if deleted_count:
                    logger.info(f"Purged {deleted_count} orphaned price checks for travel date {target_date.id}")
                total += deleted_count
        return total
