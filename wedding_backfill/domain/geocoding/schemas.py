"""Geocoding domain schemas - Pydantic models for resolver input and results"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from ...shared.validators import clean_address_part


class GeocodeError(str, Enum):
    """Why an address could not be resolved"""

    EMPTY_ADDRESS = "empty-address"
    NOT_FOUND = "address-not-found"
    INVALID_COORDINATES = "invalid-coordinates"
    HTTP_ERROR = "http-error"


class AddressQuery(BaseModel):
    """Free-text postal address of a venue or partner"""

    street: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None

    def parts(self) -> list[str]:
        """Non-empty address parts in query order"""
        values = [self.street, self.city, self.postal_code, self.country]
        return [part for part in (clean_address_part(v) for v in values) if part]

    def full_text(self) -> str:
        return ", ".join(self.parts())


class GeocodeResult(BaseModel):
    """Outcome of resolving one address"""

    success: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    error: Optional[GeocodeError] = None
    detail: Optional[str] = None
    query: Optional[str] = None

    @classmethod
    def resolved(cls, latitude: float, longitude: float, query: str) -> "GeocodeResult":
        return cls(success=True, latitude=latitude, longitude=longitude, query=query)

    @classmethod
    def failed(
        cls, error: GeocodeError, detail: Optional[str] = None, query: Optional[str] = None
    ) -> "GeocodeResult":
        return cls(success=False, error=error, detail=detail, query=query)


class CoverageStats(BaseModel):
    """How many entities of one kind have coordinates"""

    entity: str
    total: int
    with_coordinates: int

    @property
    def without_coordinates(self) -> int:
        return self.total - self.with_coordinates

    @property
    def coverage_percent(self) -> float:
        if not self.total:
            return 0.0
        return self.with_coordinates / self.total * 100
