from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Union

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from flight_tracker.database import init_db
from flight_tracker.models.destination import Destination
from flight_tracker.schemas.flight_search_schema import FlightOption, FlightSearchResult
from price_collector.providers.base import FlightProviderInterface

NOW = datetime(2026, 3, 1, 12, 0, 0)

DESTINATIONS = {
    "PMI": "Palma de Mallorca",
    "ARN": "Stockholm Arlanda",
    "TFS": "Tenerife South",
    "LPA": "Gran Canaria",
}


class FakeClock:
    """Callable clock returning a settable naive UTC instant."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


def make_option(price, airline="Ryanair", stops=0, departure=datetime(2026, 4, 18, 6, 30), minutes=135):
    return FlightOption(
        price=Decimal(str(price)),
        currency="EUR",
        departure_time=departure,
        arrival_time=departure + timedelta(minutes=minutes),
        airline=airline,
        stops=stops,
        booking_url="https://example.com/offer",
    )


class StubProvider(FlightProviderInterface):
    """
    Scripted provider keyed by destination code. A value may be a list of
    options, a ready FlightSearchResult or an exception to raise.
    """

    def __init__(self, responses: Dict[str, Union[List[FlightOption], FlightSearchResult, Exception]] = None,
                 default_price=100):
        self.responses = responses or {}
        self.default_price = default_price
        self.calls = []

    @property
    def provider_name(self) -> str:
        return "stub"

    async def search_flights(self, origin, destination, outbound_date, return_date):
        self.calls.append((origin, destination, outbound_date, return_date))
        response = self.responses.get(destination, [make_option(self.default_price)])
        if isinstance(response, Exception):
            raise response
        if isinstance(response, FlightSearchResult):
            return response
        return FlightSearchResult(
            success=True,
            flights=response,
            origin=origin,
            destination=destination,
            outbound_date=outbound_date,
            return_date=return_date,
        )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock(NOW)


@pytest.fixture
def destinations(db):
    """Airport code -> persisted Destination."""
    rows = {}
    for code, name in DESTINATIONS.items():
        dest = Destination(airport_code=code, name=name)
        db.add(dest)
        rows[code] = dest
    db.commit()
    return rows


@pytest.fixture
def no_sleep(monkeypatch):
    """Record asyncio.sleep calls instead of waiting."""
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    monkeypatch.setattr("flight_tracker.services.flight_search_service.asyncio.sleep", fake_sleep)
    return delays
