from typing import Iterable, List, Optional, Set

from sqlalchemy import or_
from sqlalchemy.orm import Session

from flight_tracker.models.destination import Destination
from flight_tracker.repositories.base import DestinationRepositoryInterface


class DestinationRepository(DestinationRepositoryInterface):

    def __init__(self, db: Session):
        self._db = db

    def get_by_id(self, destination_id: int) -> Optional[Destination]:
        return self._db.get(Destination, destination_id)

    def get_by_airport_code(self, airport_code: str) -> Optional[Destination]:
        return self._db.query(Destination).filter(Destination.airport_code == airport_code).first()

    def get_all(self) -> List[Destination]:
        return self._db.query(Destination).order_by(Destination.name.asc()).all()

    def get_existing_ids(self, destination_ids: Iterable[int]) -> Set[int]:
        ids = set(destination_ids)
        if not ids:
            return set()
        rows = self._db.query(Destination.id).filter(Destination.id.in_(ids)).all()
        return {row.id for row in rows}

    def search(self, query: str, max_results: int = 10) -> List[Destination]:
        term = (query or "").strip()
        if not term:
            return []
        # LIKE wildcards in the query match literally
        escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        return (
            self._db.query(Destination)
            .filter(or_(
                Destination.airport_code.ilike(pattern, escape="\\"),
                Destination.name.ilike(pattern, escape="\\"),
            ))
            .order_by(Destination.name.asc())
            .limit(max_results)
            .all()
        )

    def add(self, destination: Destination) -> Destination:
        self._db.add(destination)
        self._db.flush()
        return destination
