"""Tests for cardex.services.query - progress, filter, search, browse."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from cardex.catalog import Catalog
from cardex.core.exceptions import NotFoundError, ValidationError
from cardex.models import DexFilter, Sighting
from cardex.services import CollectionIndex, QueryService, SightingStore
from cardex.services.query import search_models
from cardex.storage.memory import MemoryStorage

# =============================================================================
# Test Fixtures and Helpers
# =============================================================================


def make_sighting(sid: str, model_id: str, user_id: str = "user-1") -> Sighting:
    return Sighting(
        id=sid,
        user_id=user_id,
        model_id=model_id,
        photo_reference=f"{sid}.jpg",
        created_at=datetime(2024, 6, 1, tzinfo=UTC),
    )


class Harness:
    def __init__(self, catalog: Catalog) -> None:
        storage = MemoryStorage()
        index = CollectionIndex(storage)
        self.sightings = SightingStore(catalog, storage, index)
        self.queries = QueryService(catalog, index, self.sightings)

    async def spot(self, *model_ids: str, user_id: str = "user-1") -> None:
        for model_id in model_ids:
            await self.sightings.append_sighting(
                make_sighting(f"{user_id}-{model_id}", model_id, user_id)
            )


@pytest.fixture
def harness(catalog: Catalog) -> Harness:
    return Harness(catalog)


# =============================================================================
# Progress
# =============================================================================


class TestProgress:
    """Tests for get_progress."""

    async def test_nothing_spotted(self, harness: Harness) -> None:
        progress = await harness.queries.get_progress("user-1")
        assert (progress.spotted_count, progress.total_count, progress.percentage) == (0, 20, 0)

    async def test_five_of_twenty(self, harness: Harness) -> None:
        await harness.spot("1", "2", "5", "9", "13")
        progress = await harness.queries.get_progress("user-1")
        assert (progress.spotted_count, progress.total_count, progress.percentage) == (5, 20, 25)

    async def test_respotting_does_not_double_count(self, harness: Harness) -> None:
        await harness.spot("5")
        await harness.sightings.append_sighting(make_sighting("again", "5"))
        assert (await harness.queries.get_progress("user-1")).spotted_count == 1

    async def test_per_user(self, harness: Harness) -> None:
        await harness.spot("1", "2", user_id="bob")
        assert (await harness.queries.get_progress("user-1")).spotted_count == 0
        assert (await harness.queries.get_progress("bob")).spotted_count == 2

    async def test_empty_catalog(self) -> None:
        progress = await Harness(Catalog([], [])).queries.get_progress("user-1")
        assert progress.total_count == 0
        assert progress.percentage == 0

    async def test_complete(self, harness: Harness) -> None:
        await harness.spot(*(str(i) for i in range(1, 21)))
        assert (await harness.queries.get_progress("user-1")).percentage == 100


class TestManufacturerProgress:
    """Tests for get_manufacturer_progress."""

    async def test_honda(self, harness: Harness) -> None:
        await harness.spot("5", "6", "1")
        progress = await harness.queries.get_manufacturer_progress("user-1", "2")
        assert (progress.spotted_count, progress.total_count, progress.percentage) == (2, 4, 50)

    async def test_manufacturer_without_models(self, harness: Harness) -> None:
        progress = await harness.queries.get_manufacturer_progress("user-1", "10")
        assert progress.total_count == 0
        assert progress.percentage == 0

    async def test_unknown_manufacturer(self, harness: Harness) -> None:
        with pytest.raises(NotFoundError):
            await harness.queries.get_manufacturer_progress("user-1", "99")


# =============================================================================
# Filter and search
# =============================================================================


class TestFilterModels:
    """Tests for filter_models."""

    async def test_spotted_and_unspotted_partition(self, harness: Harness, catalog: Catalog) -> None:
        await harness.spot("18", "3", "7")
        models = catalog.list_models_joined()

        spotted = await harness.queries.filter_models(models, "spotted", "user-1")
        unspotted = await harness.queries.filter_models(models, DexFilter.UNSPOTTED, "user-1")
        everything = await harness.queries.filter_models(models, DexFilter.ALL, "user-1")

        # Catalog order, not spotting order
        assert [m.id for m in spotted] == ["3", "7", "18"]
        assert len(unspotted) == 17
        assert {m.id for m in spotted} | {m.id for m in unspotted} == {m.id for m in models}
        assert everything == models

    async def test_preserves_caller_order(self, harness: Harness, catalog: Catalog) -> None:
        await harness.spot("1", "2")
        models = list(reversed(catalog.list_models()))
        spotted = await harness.queries.filter_models(models, "spotted", "user-1")
        assert [m.id for m in spotted] == ["2", "1"]

    async def test_unknown_predicate(self, harness: Harness, catalog: Catalog) -> None:
        with pytest.raises(ValidationError, match="Unknown filter"):
            await harness.queries.filter_models(catalog.list_models(), "favorites", "user-1")


class TestSearchModels:
    """Tests for search_models."""

    def test_empty_query_returns_input(self, catalog: Catalog) -> None:
        models = catalog.list_models_joined()
        assert search_models("", models) == models
        assert search_models("   ", models) == models

    def test_model_name(self, catalog: Catalog) -> None:
        results = search_models("civic", catalog.list_models_joined())
        assert [m.display_name for m in results] == ["Honda Civic"]

    def test_manufacturer_name_case_insensitive(self, catalog: Catalog) -> None:
        results = search_models("BMW", catalog.list_models_joined())
        assert [m.id for m in results] == ["9", "10", "11", "12"]

    def test_substring_spans_both(self, catalog: Catalog) -> None:
        # "o" is in Toyota, Honda, Ford and several model names
        results = search_models("o", catalog.list_models_joined())
        assert {"1", "5", "17"} <= {m.id for m in results}

    def test_query_not_trimmed(self, catalog: Catalog) -> None:
        models = catalog.list_models_joined()
        assert [m.id for m in search_models("3 series", models)] == ["9"]
        assert search_models(" civic", models) == []
        assert search_models("civic ", models) == []

    def test_no_match(self, catalog: Catalog) -> None:
        assert search_models("zzz", catalog.list_models_joined()) == []

    def test_service_defaults_to_catalog(self, harness: Harness) -> None:
        assert [m.id for m in harness.queries.search_models("mustang")] == ["18"]


# =============================================================================
# Browse and detail
# =============================================================================


class TestBrowse:
    """Tests for the dex grid."""

    async def test_search_then_filter(self, harness: Harness) -> None:
        await harness.spot("5")
        items = await harness.queries.browse("user-1", query="honda", predicate="unspotted")
        assert [i.model.id for i in items] == ["6", "7", "8"]
        assert not any(i.spotted for i in items)

    async def test_entries_attached(self, harness: Harness) -> None:
        await harness.spot("5")
        items = await harness.queries.browse("user-1")
        assert len(items) == 20
        civic = next(i for i in items if i.model.id == "5")
        assert civic.spotted
        assert civic.entry.best_photo_reference == "user-1-5.jpg"


class TestModelDetail:
    """Tests for get_model_detail."""

    async def test_unspotted(self, harness: Harness) -> None:
        detail = await harness.queries.get_model_detail("user-1", "18")
        assert detail.model.display_name == "Ford Mustang"
        assert not detail.spotted
        assert detail.sightings == []

    async def test_spotted(self, harness: Harness) -> None:
        await harness.spot("18")
        detail = await harness.queries.get_model_detail("user-1", "18")
        assert detail.spotted
        assert [s.id for s in detail.sightings] == ["user-1-18"]

    async def test_unknown_model(self, harness: Harness) -> None:
        with pytest.raises(NotFoundError):
            await harness.queries.get_model_detail("user-1", "99")
