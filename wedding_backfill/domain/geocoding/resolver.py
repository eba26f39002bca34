"""
Nominatim (OpenStreetMap) address resolver.

Turns a free-text postal address into coordinates. When the strict query
returns nothing the query is degraded step by step (house number dropped,
then locality only) before giving up. Only the first candidate is used.

NOTE:
Nominatim usage policy requires a valid User-Agent with contact info and at
most one request per second, so every degraded retry goes through the same
throttle as the batch loop.
"""

import logging
import math
from typing import Awaitable, Callable, Optional

import httpx

from ...config import (
    GEOCODING_COUNTRY_CODES,
    GEOCODING_TIMEOUT_SECONDS,
    NOMINATIM_BASE_URL,
    NOMINATIM_USER_AGENT,
)
from ...shared.validators import clean_address_part, has_valid_coordinates, strip_house_number
from .schemas import AddressQuery, GeocodeError, GeocodeResult

logger = logging.getLogger(__name__)


def build_query_variants(address: AddressQuery) -> list[str]:
    """
    Build the ordered list of queries to try for an address.

    1. strict: street, city, postal code, country
    2. street without its house number
    3. locality only: city, postal code, country
    """
    city = clean_address_part(address.city)
    postal_code = clean_address_part(address.postal_code)
    country = clean_address_part(address.country)

    candidates = [
        address.parts(),
        [strip_house_number(address.street), city, postal_code, country],
        [city, postal_code, country],
    ]

    queries: list[str] = []
    for parts in candidates:
        query = ", ".join(part for part in parts if part)
        # A variant reduced to the country alone would match the whole country
        if not query or query == country or query in queries:
            continue
        queries.append(query)
    return queries


class AddressResolver:
    """Resolve addresses through the Nominatim search endpoint"""

    def __init__(
        self,
        client: httpx.AsyncClient,
        throttle: Optional[Callable[[], Awaitable[None]]] = None,
        base_url: str = NOMINATIM_BASE_URL,
        user_agent: str = NOMINATIM_USER_AGENT,
        country_codes: Optional[str] = GEOCODING_COUNTRY_CODES,
        timeout: float = GEOCODING_TIMEOUT_SECONDS,
        use_cache: bool = True,
    ):
        self.client = client
        self.throttle = throttle
        self.search_url = f"{base_url.rstrip('/')}/search"
        self.user_agent = user_agent
        self.country_codes = country_codes
        self.timeout = timeout
        # query -> result, or None when Nominatim had no candidate
        self._cache: Optional[dict[str, Optional[GeocodeResult]]] = {} if use_cache else None
        self.request_count = 0

    async def resolve(self, address: AddressQuery) -> GeocodeResult:
        """
        Resolve an address to coordinates.

        Returns a failed GeocodeResult instead of raising for per-address
        problems; the caller records it and moves on.
        """
        queries = build_query_variants(address)
        if not queries:
            return GeocodeResult.failed(GeocodeError.EMPTY_ADDRESS)

        sent_request = False
        for query in queries:
            if self._cache is not None and query in self._cache:
                cached = self._cache[query]
                if cached is None:
                    continue
                logger.debug(f"✅ Geocoding cache HIT: {query}")
                return cached

            if sent_request and self.throttle:
                await self.throttle()
            sent_request = True

            result = await self._search(query)
            if result is None:
                logger.debug(f"🔍 No candidate for '{query}', degrading query")
                continue
            return result

        return GeocodeResult.failed(GeocodeError.NOT_FOUND, query=queries[0])

    async def _search(self, query: str) -> Optional[GeocodeResult]:
        params = {"q": query, "format": "json", "limit": "1"}
        if self.country_codes:
            params["countrycodes"] = self.country_codes
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}

        self.request_count += 1
        try:
            resp = await self.client.get(
                self.search_url, params=params, headers=headers, timeout=self.timeout
            )
        except httpx.HTTPError as e:
            logger.warning(f"⚠️ Nominatim request failed for '{query}': {e}")
            return GeocodeResult.failed(GeocodeError.HTTP_ERROR, detail=str(e), query=query)

        if not resp.is_success:
            logger.warning(f"⚠️ Nominatim API error {resp.status_code}: {resp.text[:200]}")
            return GeocodeResult.failed(
                GeocodeError.HTTP_ERROR, detail=f"HTTP {resp.status_code}", query=query
            )

        try:
            data = resp.json()
        except ValueError as e:
            return GeocodeResult.failed(GeocodeError.HTTP_ERROR, detail=f"Invalid JSON: {e}", query=query)

        if not isinstance(data, list):
            return GeocodeResult.failed(
                GeocodeError.HTTP_ERROR, detail="Unexpected response shape", query=query
            )
        if not data:
            self._remember(query, None)
            return None

        candidate = data[0] if isinstance(data[0], dict) else {}
        try:
            latitude = float(candidate.get("lat"))
            longitude = float(candidate.get("lon"))
        except (TypeError, ValueError):
            latitude = longitude = math.nan

        if not has_valid_coordinates(latitude, longitude):
            return GeocodeResult.failed(
                GeocodeError.INVALID_COORDINATES,
                detail=f"lat={candidate.get('lat')} lon={candidate.get('lon')}",
                query=query,
            )

        result = GeocodeResult.resolved(latitude, longitude, query)
        self._remember(query, result)
        return result

    def _remember(self, query: str, result: Optional[GeocodeResult]) -> None:
        if self._cache is not None:
            self._cache[query] = result
