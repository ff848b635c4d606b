from sqlalchemy import Column, Integer, String
from flight_tracker.database import Base

class Destination(Base):
    __tablename__ = "destinations"

    id = Column(Integer, primary_key=True, index=True)
    airport_code = Column(String(3), unique=True, index=True, nullable=False)  # IATA, immutable after creation
    name = Column(String(200), nullable=False)

    def __repr__(self):
        return f"<Destination {self.airport_code} {self.name!r}>"
