import random

from geoguess.game.catalog import LocationCatalog, format_category_name
from geoguess.game.models import Location


def test_lists_categories_and_locations(catalog):
    assert catalog.list_categories() == ["countries", "german-cities", "empty"]
    names = [loc.name for loc in catalog.list_locations("german-cities")]
    assert names == ["Berlin", "Hamburg", "München"]
    assert catalog.list_locations("missing") == []


def test_canonical_name_loaded_from_english_name(catalog):
    germany = catalog.list_locations("countries")[0]
    assert germany.canonical_name == "Germany"


def test_pick_unused_skips_used_indices(catalog):
    for _ in range(20):
        loc = catalog.pick_unused_location("german-cities", {0, 1})
        assert loc.name == "München"


def test_pick_wraps_around_when_exhausted(catalog):
    loc = catalog.pick_unused_location("german-cities", {0, 1, 2})
    assert loc in catalog.list_locations("german-cities")


def test_pick_from_empty_category_returns_none(catalog):
    assert catalog.pick_unused_location("empty", set()) is None
    assert catalog.pick_unused_location("missing", set()) is None


def test_index_of(catalog):
    hamburg = catalog.list_locations("german-cities")[1]
    assert catalog.index_of("german-cities", hamburg) == 1
    assert catalog.index_of("german-cities", Location("Nowhere", 0, 0)) is None


def test_format_category_name():
    assert format_category_name("world-landmarks") == "World Landmarks"
    assert format_category_name("countries") == "Countries"


def test_from_file(tmp_path):
    path = tmp_path / "locations.json"
    path.write_text('{"capitals": [{"name": "Tokio", "lat": 35.6762, "lng": 139.6503}]}', encoding="utf-8")
    catalog = LocationCatalog.from_file(path, rng=random.Random(1))
    assert catalog.list_categories() == ["capitals"]
    assert catalog.pick_unused_location("capitals").name == "Tokio"


def test_missing_file_gives_empty_catalog(tmp_path):
    catalog = LocationCatalog.from_file(tmp_path / "nope.json")
    assert catalog.list_categories() == []
