"""
Abstract repository contracts over the persistence store.

Services depend on these interfaces only. Implementations never commit:
the calling service owns the unit of work and commits (or rolls back) once,
so multi-row changes such as an association replacement plus its orphan
purge land in a single transaction.
"""
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Iterable, List, Optional, Set, Tuple

from flight_tracker.models.destination import Destination
from flight_tracker.models.price_check import PriceCheck
from flight_tracker.models.target_date import TargetDate


class DestinationRepositoryInterface(ABC):

    @abstractmethod
    def get_by_id(self, destination_id: int) -> Optional[Destination]:
        ...

    @abstractmethod
    def get_by_airport_code(self, airport_code: str) -> Optional[Destination]:
        ...

    @abstractmethod
    def get_all(self) -> List[Destination]:
        ...

    @abstractmethod
    def get_existing_ids(self, destination_ids: Iterable[int]) -> Set[int]:
        """Subset of ``destination_ids`` that exist."""
        ...

    @abstractmethod
    def search(self, query: str, max_results: int = 10) -> List[Destination]:
        """Case-insensitive substring match on airport code or name. Blank query matches nothing."""
        ...

    @abstractmethod
    def add(self, destination: Destination) -> Destination:
        ...


class TargetDateRepositoryInterface(ABC):

    @abstractmethod
    def get_by_id(self, target_date_id: int) -> Optional[TargetDate]:
        """Fetch a date range regardless of its lifecycle state."""
        ...

    @abstractmethod
    def get_by_dates(self, outbound_date: date, return_date: date) -> Optional[TargetDate]:
        """Active date range with exactly these dates, if any."""
        ...

    @abstractmethod
    def get_active(self) -> List[TargetDate]:
        """Active date ranges, outbound date ascending."""
        ...

    @abstractmethod
    def get_deleted(self) -> List[TargetDate]:
        """Soft-deleted date ranges, most recently deleted first."""
        ...

    @abstractmethod
    def get_all_including_deleted(self) -> List[TargetDate]:
        ...

    @abstractmethod
    def get_upcoming(self, today: date) -> List[TargetDate]:
        """Active date ranges whose outbound date is on or after ``today``."""
        ...

    @abstractmethod
    def add(self, target_date: TargetDate) -> TargetDate:
        ...

    @abstractmethod
    def get_destinations(self, target_date_id: int) -> List[Destination]:
        ...

    @abstractmethod
    def replace_destinations(
        self, target_date_id: int, destination_ids: Iterable[int], now: datetime
    ) -> Tuple[Set[int], Set[int]]:
        """
        Make the association set equal to ``destination_ids``.

        Returns:
            ``(added, removed)`` destination id sets.
        """
        ...


class PriceCheckRepositoryInterface(ABC):

    @abstractmethod
    def add(self, price_check: PriceCheck) -> PriceCheck:
        ...

    @abstractmethod
    def get_latest(self, target_date_id: int, destination_id: int) -> Optional[PriceCheck]:
        ...

    @abstractmethod
    def get_latest_for_target_date(self, target_date_id: int) -> List[PriceCheck]:
        """One row per destination with at least one check: its newest one."""
        ...

    @abstractmethod
    def get_recent(
        self, target_date_id: int, destination_id: int, max_age_hours: float, now: datetime
    ) -> Optional[PriceCheck]:
        """Newest row no older than ``max_age_hours`` at ``now``."""
        ...

    @abstractmethod
    def get_history(self, target_date_id: int, destination_id: int, since: datetime) -> List[PriceCheck]:
        """Rows checked at or after ``since``, oldest first."""
        ...

    @abstractmethod
    def delete_older_than(self, cutoff: datetime) -> int:
        ...

    @abstractmethod
    def delete_orphaned(self, target_date_id: int, keep_destination_ids: Iterable[int]) -> int:
        ...
