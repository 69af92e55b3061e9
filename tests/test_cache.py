from __future__ import annotations

from feedtools.models.results import CandidateMatch
from feedtools.storage.cache import CatalogCache, SearchCache


def test_search_cache_tracks_hits_and_misses():
    cache = SearchCache()

    assert cache.get("portal") is None
    cache.set("portal", [CandidateMatch("Portal", 400)])
    assert cache.get("portal") == (CandidateMatch("Portal", 400),)

    assert cache.hits == 1
    assert cache.misses == 1


def test_search_cache_keys_are_raw_queries():
    cache = SearchCache()
    cache.set("Portal", [])
    assert cache.get("portal") is None
    assert cache.get("Portal") == ()


def test_catalog_cache_exact_lookup_is_case_insensitive():
    cache = CatalogCache()
    assert not cache.is_populated

    cache.populate({"Portal 2": 620, "Portal": 400})

    assert cache.is_populated
    assert cache.find_exact("PORTAL 2") == 620
    assert cache.find_exact("portal 3") is None


def test_catalog_cache_substring_matches_keep_catalog_order():
    cache = CatalogCache()
    cache.populate(
        {
            "half-life": 70,
            "portal": 400,
            "half-life 2": 220,
            "half-life: alyx": 546560,
            "half-life 2: episode one": 380,
        }
    )

    matches = cache.find_containing("Half-Life", limit=3)

    assert [m.app_id for m in matches] == [70, 220, 546560]
    assert matches[0].name == "half-life"
    assert matches[0].url is None
