import pytest

from flight_tracker.repositories.destination_repository import DestinationRepository


@pytest.mark.parametrize("query", ["", "   ", None])
def test_search_with_blank_query_matches_nothing(db, destinations, query):
    assert DestinationRepository(db).search(query) == []


def test_search_matches_airport_code_case_insensitively(db, destinations):
    assert [d.airport_code for d in DestinationRepository(db).search("pmi")] == ["PMI"]


def test_search_matches_name_fragment_ordered_by_name(db, destinations):
    results = DestinationRepository(db).search("ar")

    assert [d.name for d in results] == ["Gran Canaria", "Stockholm Arlanda"]


def test_search_caps_results(db, destinations):
    repo = DestinationRepository(db)

    assert [d.airport_code for d in repo.search("a")] == ["LPA", "PMI", "ARN"]
    assert [d.airport_code for d in repo.search("a", max_results=2)] == ["LPA", "PMI"]


def test_search_treats_like_wildcards_literally(db, destinations):
    assert DestinationRepository(db).search("%") == []
    assert DestinationRepository(db).search("_") == []
