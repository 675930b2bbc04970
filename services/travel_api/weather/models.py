"""
Forecast records and the WMO weather-code lookup.

Open-Meteo reports WMO interpretation codes per day:
    0-1    clear            2-3    partly cloudy     45-48  fog (cloudy)
    51-67  drizzle/rain     71-77  snow              80-82  rain showers
    85-86  snow showers     95-99  thunderstorm
Anything unlisted falls back to CLOUDY.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any


class WeatherCondition(str, Enum):
    CLEAR = "CLEAR"
    PARTLY_CLOUDY = "PARTLY_CLOUDY"
    CLOUDY = "CLOUDY"
    RAINY = "RAINY"
    SNOWY = "SNOWY"
    STORMY = "STORMY"


def condition_for_code(code: int) -> WeatherCondition:
    if code in (0, 1):
        return WeatherCondition.CLEAR
    if code in (2, 3):
        return WeatherCondition.PARTLY_CLOUDY
    if 45 <= code <= 48:
        return WeatherCondition.CLOUDY
    if 51 <= code <= 67 or 80 <= code <= 82:
        return WeatherCondition.RAINY
    if 71 <= code <= 77 or 85 <= code <= 86:
        return WeatherCondition.SNOWY
    if 95 <= code <= 99:
        return WeatherCondition.STORMY
    return WeatherCondition.CLOUDY


@dataclass(frozen=True)
class DailyForecast:
    date: date
    temperature_max: float
    temperature_min: float
    precipitation: float
    wind_speed: float
    weather_code: int

    def __post_init__(self) -> None:
        if isinstance(self.date, str):
            object.__setattr__(self, "date", date.fromisoformat(self.date[:10]))
        for name in ("temperature_max", "temperature_min", "precipitation", "wind_speed", "weather_code"):
            if getattr(self, name) is None:
                raise ValueError(f"DailyForecast {name} is required")
        if self.precipitation < 0:
            raise ValueError("DailyForecast precipitation must be non-negative")
        if self.wind_speed < 0:
            raise ValueError("DailyForecast wind_speed must be non-negative")

    @property
    def weather_condition(self) -> WeatherCondition:
        return condition_for_code(self.weather_code)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "temperatureMax": self.temperature_max,
            "temperatureMin": self.temperature_min,
            "precipitation": self.precipitation,
            "windSpeed": self.wind_speed,
            "weatherCode": self.weather_code,
            "weatherCondition": self.weather_condition.value,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "DailyForecast":
        return cls(
            date=d["date"],
            temperature_max=d["temperatureMax"],
            temperature_min=d["temperatureMin"],
            precipitation=d["precipitation"],
            wind_speed=d["windSpeed"],
            weather_code=d["weatherCode"],
        )


@dataclass(frozen=True)
class WeatherForecast:
    latitude: float
    longitude: float
    timezone: str
    daily_forecasts: tuple[DailyForecast, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.timezone, str) or not self.timezone.strip():
            raise ValueError("WeatherForecast timezone is required")
        if not -90 <= self.latitude <= 90:
            raise ValueError("WeatherForecast latitude must be between -90 and 90")
        if not -180 <= self.longitude <= 180:
            raise ValueError("WeatherForecast longitude must be between -180 and 180")
        object.__setattr__(self, "timezone", self.timezone.strip())
        object.__setattr__(self, "daily_forecasts", tuple(self.daily_forecasts))
        if not self.daily_forecasts:
            raise ValueError("WeatherForecast must have at least one daily forecast")

    def to_dict(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timezone": self.timezone,
            "dailyForecasts": [day.to_dict() for day in self.daily_forecasts],
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "WeatherForecast":
        return cls(
            latitude=d["latitude"],
            longitude=d["longitude"],
            timezone=d["timezone"],
            daily_forecasts=tuple(DailyForecast.from_dict(day) for day in d["dailyForecasts"]),
        )
