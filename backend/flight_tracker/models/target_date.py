from dataclasses import dataclass
from datetime import datetime
from typing import Union

from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from flight_tracker.database import Base
from flight_tracker.errors import NotFoundError
from flight_tracker.models.destination import Destination


@dataclass(frozen=True)
class Active:
    pass


@dataclass(frozen=True)
class Deleted:
    at: datetime


Lifecycle = Union[Active, Deleted]


class TargetDate(Base):
    """
    A tracked outbound/return date pair.

    ``is_deleted`` and ``deleted_at`` are only changed together, through
    ``soft_delete()`` and ``restore()``. Read the state via ``lifecycle``.
    """
    __tablename__ = "target_dates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    outbound_date = Column(Date, nullable=False, index=True)
    return_date = Column(Date, nullable=False)
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    destination_links = relationship(
        "TargetDateDestination",
        back_populates="target_date",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        # Dates are unique among live rows only; deleted rows may share them
        Index(
            'uq_target_dates_active_dates',
            'outbound_date',
            'return_date',
            unique=True,
            postgresql_where=(is_deleted == False),  # noqa: E712
            sqlite_where=(is_deleted == False),  # noqa: E712
        ),
    )

    @property
    def lifecycle(self) -> Lifecycle:
        if self.is_deleted:
            return Deleted(at=self.deleted_at)
        return Active()

    @property
    def is_active(self) -> bool:
        return isinstance(self.lifecycle, Active)

    def soft_delete(self, now: datetime) -> None:
        if not self.is_active:
            raise NotFoundError(f"Travel date {self.id} is already deleted")
        self.is_deleted = True
        self.deleted_at = now

    def restore(self) -> None:
        if self.is_active:
            raise NotFoundError(f"Travel date {self.id} is not deleted")
        self.is_deleted = False
        self.deleted_at = None

    def __repr__(self):
        return f"<TargetDate {self.id} {self.name!r} {self.outbound_date}->{self.return_date} {self.lifecycle}>"


class TargetDateDestination(Base):
    """Junction row: this destination is actively tracked for this date range."""
    __tablename__ = "target_date_destinations"

    id = Column(Integer, primary_key=True, index=True)
    target_date_id = Column(Integer, ForeignKey("target_dates.id", ondelete="CASCADE"), nullable=False, index=True)
    destination_id = Column(Integer, ForeignKey("destinations.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, nullable=False)

    target_date = relationship("TargetDate", back_populates="destination_links")
    destination = relationship(Destination)

    __table_args__ = (
        UniqueConstraint('target_date_id', 'destination_id', name='uq_target_date_destination'),
    )
