"""City record as returned by the geocoding provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def _require_text(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"City {field_name} is required")
    return value.strip()


@dataclass(frozen=True)
class City:
    id: int
    name: str
    country: str
    country_code: str
    latitude: float
    longitude: float
    timezone: str
    population: int | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("City id is required")
        # frozen: normalise through object.__setattr__
        for field_name in ("name", "country", "country_code", "timezone"):
            object.__setattr__(self, field_name, _require_text(getattr(self, field_name), field_name))
        if self.latitude is None:
            raise ValueError("City latitude is required")
        if self.longitude is None:
            raise ValueError("City longitude is required")
        if not -90 <= self.latitude <= 90:
            raise ValueError("City latitude must be between -90 and 90")
        if not -180 <= self.longitude <= 180:
            raise ValueError("City longitude must be between -180 and 180")
        if self.population is not None and self.population < 0:
            raise ValueError("City population must be non-negative")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "country": self.country,
            "countryCode": self.country_code,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timezone": self.timezone,
            "population": self.population,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "City":
        return cls(
            id=d["id"],
            name=d["name"],
            country=d["country"],
            country_code=d["countryCode"],
            latitude=d["latitude"],
            longitude=d["longitude"],
            timezone=d["timezone"],
            population=d.get("population"),
        )
