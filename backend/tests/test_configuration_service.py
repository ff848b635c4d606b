from datetime import date

import pytest

from flight_tracker.config import DestinationConfig, Settings, TargetDateConfig
from flight_tracker.errors import ValidationError
from flight_tracker.models.destination import Destination
from flight_tracker.models.target_date import TargetDate
from flight_tracker.services.configuration_service import ConfigurationService
from flight_tracker.services.travel_date_service import TravelDateService


def make_settings(destinations=None, target_dates=None):
    return Settings(
        origin_airport="FRA",
        destinations=destinations if destinations is not None else [
            DestinationConfig(code="PMI", name="Palma de Mallorca"),
            DestinationConfig(code="ARN", name="Stockholm"),
        ],
        target_dates=target_dates if target_dates is not None else [
            TargetDateConfig(name="Easter", outbound="2026-04-18", return_date="2026-04-21"),
        ],
    )


def test_initialize_all_creates_destinations_and_target_dates(db, clock):
    ConfigurationService(db, make_settings(), clock).initialize_all()

    codes = sorted(d.airport_code for d in db.query(Destination).all())
    assert codes == ["ARN", "PMI"]

    easter = db.query(TargetDate).one()
    assert (easter.name, easter.outbound_date, easter.return_date) == ("Easter", date(2026, 4, 18), date(2026, 4, 21))
    tracked = sorted(d.airport_code for d in TravelDateService(db).get_destinations(easter.id))
    assert tracked == ["ARN", "PMI"]


def test_initialize_all_is_idempotent_and_updates_names(db, clock):
    ConfigurationService(db, make_settings(), clock).initialize_all()

    clock.advance(days=1)
    renamed = make_settings(
        destinations=[DestinationConfig(code="PMI", name="Mallorca"), DestinationConfig(code="ARN", name="Stockholm")],
        target_dates=[TargetDateConfig(name="Easter holidays", outbound="2026-04-18", return_date="2026-04-21")],
    )
    ConfigurationService(db, renamed, clock).initialize_all()

    assert db.query(Destination).count() == 2
    assert db.query(Destination).filter(Destination.airport_code == "PMI").one().name == "Mallorca"
    easter = db.query(TargetDate).one()
    assert easter.name == "Easter holidays"
    assert easter.updated_at == clock.now


def test_invalid_target_dates_are_skipped(db, clock):
    settings = make_settings(target_dates=[
        TargetDateConfig(name="Broken", outbound="18.04.2026", return_date="2026-04-21"),
        TargetDateConfig(name="Backwards", outbound="2026-04-21", return_date="2026-04-18"),
        TargetDateConfig(name="Summer", outbound="2026-07-01", return_date="2026-07-14"),
    ])

    ConfigurationService(db, settings, clock).initialize_all()

    assert [t.name for t in db.query(TargetDate).all()] == ["Summer"]


def test_target_date_config_accepts_return_alias():
    config = TargetDateConfig.model_validate({"name": "Easter", "outbound": "2026-04-18", "return": "2026-04-21"})

    assert config.return_date == "2026-04-21"


def test_resync_recreates_a_soft_deleted_configured_range(db, clock):
    ConfigurationService(db, make_settings(), clock).initialize_all()
    travel_dates = TravelDateService(db, clock=clock)
    original = db.query(TargetDate).one()
    travel_dates.soft_delete(original.id)

    ConfigurationService(db, make_settings(), clock).initialize_all()

    assert [t.id for t in travel_dates.list_deleted()] == [original.id]
    active = travel_dates.list_active()
    assert len(active) == 1
    assert active[0].id != original.id
    assert (active[0].outbound_date, active[0].return_date) == (date(2026, 4, 18), date(2026, 4, 21))
    with pytest.raises(ValidationError):
        travel_dates.restore(original.id)
