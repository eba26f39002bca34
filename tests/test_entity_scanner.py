from wedding_backfill.domain.geocoding.repository import GeocodingRepository
from wedding_backfill.domain.media.repository import MediaRepository
from wedding_backfill.models import Establishment, Partner, PartnerStorefront


def add_establishments(db, rows):
    for id_, lat, lon in rows:
        db.add(Establishment(id=id_, name=f"Venue {id_}", latitude=lat, longitude=lon))
    db.commit()


class TestEntityScanner:
    def test_resolved_entities_are_excluded(self, db):
        add_establishments(
            db,
            [("e1", 48.8, 2.3), ("e2", None, None), ("e3", 45.7, None), ("e4", 95.0, 2.0)],
        )
        scanner = GeocodingRepository.scanner(Establishment)

        batch = scanner.next_batch(db)

        assert [e.id for e in batch] == ["e2", "e3", "e4"]
        assert scanner.count_remaining(db) == 3

    def test_batches_follow_the_cursor(self, db):
        add_establishments(db, [(f"e{i}", None, None) for i in (5, 1, 4, 2, 3)])
        scanner = GeocodingRepository.scanner(Establishment)

        first = scanner.next_batch(db, limit=2)
        second = scanner.next_batch(db, after_id=first[-1].id, limit=2)
        third = scanner.next_batch(db, after_id=second[-1].id, limit=2)

        assert [e.id for e in first] == ["e1", "e2"]
        assert [e.id for e in second] == ["e3", "e4"]
        assert [e.id for e in third] == ["e5"]
        assert scanner.next_batch(db, after_id="e5") == []

    def test_cursor_skips_unresolved_entities_before_it(self, db):
        add_establishments(db, [("e1", None, None), ("e2", None, None), ("e3", None, None)])
        scanner = GeocodingRepository.scanner(Establishment)

        assert [e.id for e in scanner.next_batch(db, after_id="e2")] == ["e3"]
        assert scanner.count_remaining(db, after_id="e1") == 2

    def test_image_scanner_uses_upload_marker(self, db):
        from datetime import datetime

        sources = ["https://cdn.test/960/a.jpg"]
        db.add(
            Establishment(
                id="e1", name="Done", source_images=sources, images_uploaded_at=datetime(2024, 5, 1)
            )
        )
        db.add(Establishment(id="e2", name="Pending", source_images=sources))
        db.commit()

        scanner = MediaRepository.scanner(Establishment)
        assert [e.id for e in scanner.next_batch(db)] == ["e2"]

    def test_image_scanner_needs_source_images(self, db):
        db.add_all(
            [
                Establishment(id="e1", name="Empty list", source_images=[]),
                Establishment(id="e2", name="No list", source_images=None),
                Establishment(id="e3", name="Gallery", source_images=["https://cdn.test/960/a.jpg"]),
            ]
        )
        db.commit()

        scanner = MediaRepository.scanner(Establishment)
        assert [e.id for e in scanner.next_batch(db)] == ["e3"]
        assert scanner.count_remaining(db) == 1

    def test_partner_image_scanner_needs_a_storefront(self, db):
        sources = ["https://cdn.test/960/a.jpg"]
        with_storefront = Partner(id="p1", company_name="Fleurs & Co", source_images=sources)
        with_storefront.storefronts.append(PartnerStorefront(id="s1"))
        db.add_all([with_storefront, Partner(id="p2", company_name="Orphan", source_images=sources)])
        db.commit()

        scanner = MediaRepository.scanner(Partner)
        assert [p.id for p in scanner.next_batch(db)] == ["p1"]


class TestGeocodingRepository:
    def test_save_and_coverage(self, db):
        add_establishments(db, [("e1", None, None), ("e2", 43.3, 5.4)])
        entity = db.get(Establishment, "e1")

        GeocodingRepository.save_coordinates(db, entity, 48.85, 2.35)
        stats = GeocodingRepository.coverage(db, "establishments")

        assert db.get(Establishment, "e1").latitude == 48.85
        assert stats.total == 2
        assert stats.with_coordinates == 2
        assert stats.coverage_percent == 100.0
