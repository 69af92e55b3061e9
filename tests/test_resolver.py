from __future__ import annotations

import asyncio

import pytest

from feedtools.core.resolver import GameResolver
from feedtools.models.results import CandidateMatch, MultipleMatches, NoMatch, SingleMatch
from feedtools.storage.cache import CatalogCache


class _FakeSearchClient:
    def __init__(self, results=()):
        self.results = tuple(results)
        self.queries = []

    async def search(self, query):
        self.queries.append(query)
        return self.results


class _FakeCatalogClient:
    def __init__(self, titles=None, fail=False):
        self.cache = CatalogCache()
        self.titles = titles or {}
        self.fail = fail
        self.loads = 0

    async def ensure_loaded(self):
        self.loads += 1
        if self.fail:
            raise RuntimeError("catalog unavailable")
        if not self.cache.is_populated and self.titles:
            self.cache.populate(self.titles)
        return self.cache


def _resolve(resolver, query):
    return asyncio.run(resolver.resolve(query))


@pytest.mark.parametrize("query, expected", [("730", 730), ("  440 ", 440), ("0620", 620)])
def test_numeric_query_resolves_without_network(query, expected):
    search, catalog = _FakeSearchClient(), _FakeCatalogClient()
    resolver = GameResolver(search, catalog)

    assert _resolve(resolver, query) == SingleMatch(expected)
    assert search.queries == []
    assert catalog.loads == 0


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://store.steampowered.com/app/1091500/Cyberpunk_2077/", 1091500),
        ("https://steamcommunity.com/app/570/", 570),
    ],
)
def test_store_url_resolves_without_network(url, expected):
    search, catalog = _FakeSearchClient(), _FakeCatalogClient()
    resolver = GameResolver(search, catalog)

    assert _resolve(resolver, url) == SingleMatch(expected)
    assert search.queries == []
    assert catalog.loads == 0


def test_single_search_result_is_selected():
    search = _FakeSearchClient([CandidateMatch("Portal 2", 620)])
    catalog = _FakeCatalogClient()

    result = _resolve(GameResolver(search, catalog), "portal two")

    assert result == SingleMatch(620)
    assert catalog.loads == 0


def test_several_search_results_need_a_selection():
    candidates = [CandidateMatch("Half-Life", 70), CandidateMatch("Half-Life 2", 220)]
    search = _FakeSearchClient(candidates)

    result = _resolve(GameResolver(search, _FakeCatalogClient()), "Half Life")

    assert isinstance(result, MultipleMatches)
    assert result.candidates == tuple(candidates)


def test_catalog_exact_match_after_empty_search():
    catalog = _FakeCatalogClient({"Portal 2": 620, "Portal": 400})

    result = _resolve(GameResolver(_FakeSearchClient(), catalog), "PORTAL")

    assert result == SingleMatch(400)
    assert catalog.loads == 1


def test_catalog_substring_matches_are_limited():
    titles = {f"puzzle game {i}": i for i in range(1, 10)}
    catalog = _FakeCatalogClient(titles)

    result = _resolve(GameResolver(_FakeSearchClient(), catalog, match_limit=4), "Puzzle")

    assert isinstance(result, MultipleMatches)
    assert [c.app_id for c in result.candidates] == [1, 2, 3, 4]


def test_nothing_found_anywhere():
    catalog = _FakeCatalogClient({"portal": 400})

    assert _resolve(GameResolver(_FakeSearchClient(), catalog), "zzz") == NoMatch()


def test_empty_catalog_gives_no_match():
    assert _resolve(GameResolver(_FakeSearchClient(), _FakeCatalogClient()), "x") == NoMatch()


def test_errors_degrade_to_no_match():
    catalog = _FakeCatalogClient(fail=True)

    assert _resolve(GameResolver(_FakeSearchClient(), catalog), "Portal") == NoMatch()
