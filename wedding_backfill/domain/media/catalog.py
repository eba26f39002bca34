"""
Scraped source catalog.

The scrapers dumped one JSON file per vendor category ({"vendors": [...]} or a
bare list) plus venues.json ({"venues": [...]}). Entries are matched to
database rows by case-insensitive name, and only the configured resolution
(URLs containing /960/) is kept.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, Union

from sqlalchemy.orm import Session

from ...config import IMAGE_RESOLUTION
from ...exceptions import SourceCatalogError
from ...models import Establishment, Partner
from ...shared.validators import normalize_name

logger = logging.getLogger(__name__)

VENUE_FILES = ["venues.json"]

PARTNER_FILES = [
    "beauty.json",
    "caterers.json",
    "decorators.json",
    "dresses.json",
    "entertainment.json",
    "florist-decoration.json",
    "florists.json",
    "gifts.json",
    "honeymoon.json",
    "invitations.json",
    "jewelry.json",
    "music-vendors.json",
    "officiants.json",
    "organization.json",
    "photographers.json",
    "suits.json",
    "transport.json",
    "videographers.json",
    "wedding-cakes.json",
    "wine-spirits.json",
]


def read_entries(path: Path) -> list[dict]:
    """Read the entries of one scraped file"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise SourceCatalogError(f"Cannot read {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("vendors") or data.get("venues") or []
    if not isinstance(data, list):
        raise SourceCatalogError(f"Unexpected structure in {path}")
    return [entry for entry in data if isinstance(entry, dict)]


def filter_resolution(urls: Iterable[str], resolution: str = IMAGE_RESOLUTION) -> list[str]:
    marker = f"/{resolution}/"
    kept = []
    for url in urls or []:
        if isinstance(url, str) and marker in url and url not in kept:
            kept.append(url)
    return kept


def load_source_catalog(
    data_dir: Union[str, Path], file_names: Iterable[str], resolution: str = IMAGE_RESOLUTION
) -> dict[str, list[str]]:
    """
    Build {normalized name: [image urls]} from the scraped files.

    Missing files are logged and skipped; the first entry wins on duplicate names.
    """
    data_dir = Path(data_dir)
    catalog: dict[str, list[str]] = {}
    for file_name in file_names:
        path = data_dir / file_name
        if not path.exists():
            logger.warning(f"⚠️ File {file_name} not found in {data_dir}")
            continue
        entries = read_entries(path)
        for entry in entries:
            name = normalize_name(entry.get("name"))
            if not name or name in catalog:
                continue
            images = filter_resolution(entry.get("images"), resolution)
            if images:
                catalog[name] = images
        logger.info(f"📄 {file_name}: {len(entries)} entries")
    logger.info(f"📚 {len(catalog)} named entries with {resolution}p images")
    return catalog


def apply_source_catalog(db: Session, model, catalog: dict[str, list[str]]) -> int:
    """Store catalog URLs on rows whose name matches; returns rows updated"""
    name_attr = "company_name" if model is Partner else "name"
    updated = 0
    for entity in db.query(model).order_by(model.id.asc()):
        images = catalog.get(normalize_name(getattr(entity, name_attr)))
        if not images or entity.source_images == images:
            continue
        entity.source_images = images
        updated += 1
    db.commit()
    logger.info(f"💾 {updated} {model.__tablename__} updated with source images")
    return updated


def import_source_images(db: Session, data_dir: Union[str, Path]) -> dict[str, int]:
    venues = load_source_catalog(data_dir, VENUE_FILES)
    vendors = load_source_catalog(data_dir, PARTNER_FILES)
    return {
        "establishments": apply_source_catalog(db, Establishment, venues),
        "partners": apply_source_catalog(db, Partner, vendors),
    }
