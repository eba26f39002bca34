import json

import pytest

from wedding_backfill.domain.media.catalog import (
    filter_resolution,
    import_source_images,
    load_source_catalog,
    read_entries,
)
from wedding_backfill.exceptions import SourceCatalogError
from wedding_backfill.models import Establishment, Partner


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")


class TestCatalogFiles:
    def test_read_entries_shapes(self, tmp_path):
        write_json(tmp_path / "venues.json", {"venues": [{"name": "A"}, "junk"]})
        write_json(tmp_path / "florists.json", {"vendors": [{"name": "B"}]})
        write_json(tmp_path / "cakes.json", [{"name": "C"}])

        assert read_entries(tmp_path / "venues.json") == [{"name": "A"}]
        assert read_entries(tmp_path / "florists.json") == [{"name": "B"}]
        assert read_entries(tmp_path / "cakes.json") == [{"name": "C"}]

    def test_unreadable_file(self, tmp_path):
        (tmp_path / "venues.json").write_text("{oops", encoding="utf-8")
        with pytest.raises(SourceCatalogError):
            read_entries(tmp_path / "venues.json")

    def test_filter_resolution(self):
        urls = [
            "https://cdn.test/960/a.jpg",
            "https://cdn.test/480/a.jpg",
            "https://cdn.test/960/a.jpg",
            None,
        ]
        assert filter_resolution(urls, "960") == ["https://cdn.test/960/a.jpg"]

    def test_load_catalog_first_entry_wins(self, tmp_path):
        write_json(
            tmp_path / "photographers.json",
            {
                "vendors": [
                    {"name": "Studio Lumière", "images": ["https://cdn.test/960/1.jpg"]},
                    {"name": "studio lumière ", "images": ["https://cdn.test/960/2.jpg"]},
                    {"name": "No Photos", "images": ["https://cdn.test/480/3.jpg"]},
                ]
            },
        )

        catalog = load_source_catalog(tmp_path, ["photographers.json", "missing.json"])

        assert catalog == {"studio lumière": ["https://cdn.test/960/1.jpg"]}


def test_import_source_images(db, tmp_path):
    write_json(
        tmp_path / "venues.json",
        {"venues": [{"name": "Château A", "images": ["https://cdn.test/960/v.jpg"]}]},
    )
    write_json(
        tmp_path / "florists.json",
        [{"name": "FLEURS & CO", "images": ["https://cdn.test/960/f.jpg"]}],
    )
    db.add_all(
        [
            Establishment(id="e1", name="château a"),
            Establishment(id="e2", name="Other venue"),
            Partner(id="p1", company_name="Fleurs & Co"),
        ]
    )
    db.commit()

    counts = import_source_images(db, tmp_path)

    assert counts == {"establishments": 1, "partners": 1}
    assert db.get(Establishment, "e1").source_images == ["https://cdn.test/960/v.jpg"]
    assert db.get(Establishment, "e2").source_images in (None, [])
    assert db.get(Partner, "p1").source_images == ["https://cdn.test/960/f.jpg"]
