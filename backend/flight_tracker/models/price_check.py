from sqlalchemy import Column, Integer, String, Numeric, DateTime, Time, ForeignKey, Index
from flight_tracker.database import Base

class PriceCheck(Base):
    """One immutable observation of the cheapest fare for a (date range, destination) pair."""
    __tablename__ = "price_checks"

    id = Column(Integer, primary_key=True, index=True)
    target_date_id = Column(Integer, ForeignKey("target_dates.id", ondelete="CASCADE"), nullable=False)
    destination_id = Column(Integer, ForeignKey("destinations.id", ondelete="CASCADE"), nullable=False)
    check_timestamp = Column(DateTime, nullable=False, index=True)  # UTC
    price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="EUR")
    departure_time = Column(Time, nullable=False)
    arrival_time = Column(Time, nullable=False)
    airline = Column(String(100), nullable=False)
    stops = Column(Integer, nullable=False, default=0)
    booking_url = Column(String(2048), nullable=True)

    __table_args__ = (
        Index('idx_price_checks_pair_timestamp', 'target_date_id', 'destination_id', 'check_timestamp'),
    )

    def __repr__(self):
        return (
            f"<PriceCheck target_date={self.target_date_id} destination={self.destination_id} "
            f"{self.price} {self.currency} at {self.check_timestamp}>"
        )
