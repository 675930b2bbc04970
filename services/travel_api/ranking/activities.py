"""
Weather-driven activity ranking.

Each forecast day is scored 0-100 per activity with fixed rules, the daily
scores are averaged per activity (rounded half up), and activities are sorted
by score descending. Ties keep ActivityType declaration order, so the output
is fully deterministic for a given forecast.

Rules (tmax = daily max temperature in °C, precip in mm, wind in km/h):

  SKIING              base 50  tmax<0 +30 | tmax<=5 +20 | tmax>15 -20
                               SNOWY +20, precip>5 +10            clamp 0..100
  SURFING             base 50  tmax>20 +30 | tmax>=15 +20
                               precip>5 -30, wind>30 -20 | 10<=wind<=20 +10
                                                                   clamp 0..100
  INDOOR_SIGHTSEEING  base 60  precip>5 +30, tmax<5 or tmax>35 +20
                               STORMY +10                         clamp 40..100
  OUTDOOR_SIGHTSEEING base 50  15<=tmax<=25 +30 | 10<=tmax<15 or 25<tmax<=30 +20
                               precip>2 -30, wind>40 -20
                               CLEAR or PARTLY_CLOUDY +10         clamp 0..100
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

from services.travel_api.cities.models import City
from services.travel_api.monitoring.metrics import Metrics
from services.travel_api.weather.models import DailyForecast, WeatherCondition, WeatherForecast
from services.travel_api.weather.service import DEFAULT_FORECAST_DAYS, WeatherService

logger = logging.getLogger(__name__)


class ActivityType(str, Enum):
    SKIING = "SKIING"
    SURFING = "SURFING"
    INDOOR_SIGHTSEEING = "INDOOR_SIGHTSEEING"
    OUTDOOR_SIGHTSEEING = "OUTDOOR_SIGHTSEEING"


class Suitability(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"


def suitability_for_score(score: float) -> Suitability:
    if score >= 80:
        return Suitability.EXCELLENT
    if score >= 60:
        return Suitability.GOOD
    if score >= 40:
        return Suitability.FAIR
    return Suitability.POOR


@dataclass(frozen=True)
class RankedActivity:
    type: ActivityType
    score: int
    reason: str
    suitability: Suitability = field(init=False)

    def __post_init__(self) -> None:
        if not isinstance(self.type, ActivityType):
            raise ValueError(f"Invalid activity type: {self.type}")
        if self.score is None or not 0 <= self.score <= 100:
            raise ValueError("RankedActivity score must be between 0 and 100")
        if not self.reason or not self.reason.strip():
            raise ValueError("RankedActivity reason is required")
        object.__setattr__(self, "reason", self.reason.strip())
        object.__setattr__(self, "suitability", suitability_for_score(self.score))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "score": self.score,
            "suitability": self.suitability.value,
            "reason": self.reason,
        }


def _clamp(score: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, score))


def score_skiing(day: DailyForecast) -> float:
    score = 50
    if day.temperature_max < 0:
        score += 30
    elif day.temperature_max <= 5:
        score += 20
    elif day.temperature_max > 15:
        score -= 20
    if day.weather_condition is WeatherCondition.SNOWY:
        score += 20
    if day.precipitation > 5:
        score += 10
    return _clamp(score)


def score_surfing(day: DailyForecast) -> float:
    score = 50
    if day.temperature_max > 20:
        score += 30
    elif day.temperature_max >= 15:
        score += 20
    if day.precipitation > 5:
        score -= 30
    if day.wind_speed > 30:
        score -= 20
    elif 10 <= day.wind_speed <= 20:
        score += 10
    return _clamp(score)


def score_indoor_sightseeing(day: DailyForecast) -> float:
    score = 60
    if day.precipitation > 5:
        score += 30
    if day.temperature_max < 5 or day.temperature_max > 35:
        score += 20
    if day.weather_condition is WeatherCondition.STORMY:
        score += 10
    # Indoor options never drop below fair.
    return _clamp(score, low=40)


def score_outdoor_sightseeing(day: DailyForecast) -> float:
    score = 50
    tmax = day.temperature_max
    if 15 <= tmax <= 25:
        score += 30
    elif 10 <= tmax < 15 or 25 < tmax <= 30:
        score += 20
    if day.precipitation > 2:
        score -= 30
    if day.wind_speed > 40:
        score -= 20
    if day.weather_condition in (WeatherCondition.CLEAR, WeatherCondition.PARTLY_CLOUDY):
        score += 10
    return _clamp(score)


_SCORERS: dict[ActivityType, Callable[[DailyForecast], float]] = {
    ActivityType.SKIING: score_skiing,
    ActivityType.SURFING: score_surfing,
    ActivityType.INDOOR_SIGHTSEEING: score_indoor_sightseeing,
    ActivityType.OUTDOOR_SIGHTSEEING: score_outdoor_sightseeing,
}

_ACTIVITY_ORDER = {activity: index for index, activity in enumerate(ActivityType)}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def build_reason(activity: ActivityType, score: int, days: list[DailyForecast]) -> str:
    count = len(days)
    avg_temp = sum(d.temperature_max for d in days) / count
    avg_precip = sum(d.precipitation for d in days) / count
    avg_wind = sum(d.wind_speed for d in days) / count
    snowy_days = sum(1 for d in days if d.weather_condition is WeatherCondition.SNOWY)
    rainy_days = sum(1 for d in days if d.weather_condition is WeatherCondition.RAINY)

    if activity is ActivityType.SKIING:
        if score >= 80:
            snow = "snow" if snowy_days else "good conditions"
            return f"Excellent skiing conditions with cold temperatures ({avg_temp:.1f}°C) and {snow}"
        if score >= 60:
            return f"Good skiing conditions with suitable temperatures ({avg_temp:.1f}°C)"
        if score >= 40:
            return f"Fair skiing conditions, temperatures may be suboptimal ({avg_temp:.1f}°C)"
        return f"Poor skiing conditions, too warm ({avg_temp:.1f}°C) or unfavorable weather"

    if activity is ActivityType.SURFING:
        if score >= 80:
            return f"Excellent surfing conditions with warm temperatures ({avg_temp:.1f}°C) and favorable winds"
        if score >= 60:
            return f"Good surfing conditions with pleasant temperatures ({avg_temp:.1f}°C)"
        if score >= 40:
            return f"Fair surfing conditions, some rain ({avg_precip:.1f}mm) or wind ({avg_wind:.1f} km/h)"
        return "Poor surfing conditions due to heavy rain, strong winds, or cold temperatures"

    if activity is ActivityType.INDOOR_SIGHTSEEING:
        if score >= 80:
            weather = "rainy weather" if rainy_days else "unfavorable outdoor conditions"
            return f"Excellent time for indoor activities with {weather}"
        if score >= 60:
            return "Good option for indoor activities with moderate outdoor conditions"
        return "Indoor activities available, though outdoor conditions are favorable"

    if score >= 80:
        return f"Excellent outdoor sightseeing with ideal temperatures ({avg_temp:.1f}°C) and minimal rain"
    if score >= 60:
        return f"Good outdoor sightseeing conditions with pleasant weather ({avg_temp:.1f}°C)"
    if score >= 40:
        return f"Fair outdoor sightseeing, some rain ({avg_precip:.1f}mm) expected"
    return "Poor outdoor sightseeing conditions due to rain, wind, or extreme temperatures"


def rank_forecast_days(days: list[DailyForecast]) -> list[RankedActivity]:
    """Pure ranking over a non-empty list of forecast days."""
    ranked = []
    for activity, scorer in _SCORERS.items():
        average = sum(scorer(day) for day in days) / len(days)
        score = _round_half_up(average)
        ranked.append(RankedActivity(activity, score, build_reason(activity, score, days)))
    ranked.sort(key=lambda a: (-a.score, _ACTIVITY_ORDER[a.type]))
    return ranked


class ActivityRankingService:
    """
    Usage:
        service = ActivityRankingService(weather_service, metrics)
        ranked = await service.rank_activities(46.02, 7.75, days=3)
    """

    def __init__(self, weather_service: WeatherService, metrics: Metrics | None = None) -> None:
        self._weather = weather_service
        self._metrics = metrics or Metrics()

    async def rank_activities(
        self,
        latitude: float,
        longitude: float,
        days: int = DEFAULT_FORECAST_DAYS,
    ) -> list[RankedActivity]:
        forecast = await self._weather.get_weather_forecast(latitude, longitude, days)
        return self._rank(forecast)

    async def recommend_for_city(self, city: City, days: int = DEFAULT_FORECAST_DAYS) -> dict[str, Any]:
        """Forecast plus ranked activities for a city, as one response payload."""
        payload = await self.recommend_for_coordinates(city.latitude, city.longitude, days)
        return {"city": city.to_dict(), **payload}

    async def recommend_for_coordinates(
        self,
        latitude: float,
        longitude: float,
        days: int = DEFAULT_FORECAST_DAYS,
    ) -> dict[str, Any]:
        forecast = await self._weather.get_weather_forecast(latitude, longitude, days)
        activities = self._rank(forecast)
        return {
            "forecast": forecast.to_dict(),
            "activities": [activity.to_dict() for activity in activities],
            "generatedAt": datetime.now(timezone.utc).isoformat(),
        }

    def _rank(self, forecast: WeatherForecast) -> list[RankedActivity]:
        started = time.monotonic()
        self._metrics.increment_counter("activity.ranking.requests")
        ranked = rank_forecast_days(list(forecast.daily_forecasts))
        self._metrics.record_timing("activity.ranking.duration", (time.monotonic() - started) * 1000)
        logger.info(
            "Activity ranking completed: lat=%s lon=%s days=%d top=%s score=%d",
            forecast.latitude,
            forecast.longitude,
            len(forecast.daily_forecasts),
            ranked[0].type.value,
            ranked[0].score,
        )
        return ranked
