"""
Tests for activity ranking: per-day scoring rules, averaging, ordering,
and the ActivityRankingService payloads.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from services.travel_api.ranking.activities import (
    ActivityRankingService,
    ActivityType,
    RankedActivity,
    Suitability,
    rank_forecast_days,
    score_indoor_sightseeing,
    score_outdoor_sightseeing,
    score_skiing,
    score_surfing,
    suitability_for_score,
)
from services.travel_api.tests.factories import make_city, make_day, make_forecast


# ---------------------------------------------------------------------------
# Per-day scoring
# ---------------------------------------------------------------------------

class TestSkiing:
    def test_freezing_snowy_wet_day_is_capped(self):
        day = make_day(temperature_max=-5, weather_code=73, precipitation=10)
        # 50 + 30 + 20 + 10 = 110 -> 100
        assert score_skiing(day) == 100

    def test_cool_day(self):
        assert score_skiing(make_day(temperature_max=5, weather_code=3)) == 70

    def test_mild_day_is_neutral(self):
        assert score_skiing(make_day(temperature_max=10, weather_code=3)) == 50

    def test_warm_day(self):
        assert score_skiing(make_day(temperature_max=25, weather_code=0)) == 30


class TestSurfing:
    def test_warm_light_breeze(self):
        assert score_surfing(make_day(temperature_max=25, wind_speed=15)) == 90

    def test_rain_and_gale(self):
        day = make_day(temperature_max=10, precipitation=8, wind_speed=45)
        # 50 - 30 - 20 = 0
        assert score_surfing(day) == 0

    def test_fifteen_degrees_counts_as_mild(self):
        assert score_surfing(make_day(temperature_max=15, wind_speed=25)) == 70


class TestIndoorSightseeing:
    def test_never_below_forty(self):
        assert score_indoor_sightseeing(make_day(temperature_max=20, precipitation=0, weather_code=0)) == 60

    def test_stormy_cold_deluge_is_capped(self):
        day = make_day(temperature_max=2, precipitation=20, weather_code=95)
        # 60 + 30 + 20 + 10 = 120 -> 100
        assert score_indoor_sightseeing(day) == 100

    def test_heat_counts_as_bad_outdoor_weather(self):
        assert score_indoor_sightseeing(make_day(temperature_max=36, weather_code=0)) == 80


class TestOutdoorSightseeing:
    def test_ideal_day(self):
        day = make_day(temperature_max=20, precipitation=0, wind_speed=10, weather_code=0)
        assert score_outdoor_sightseeing(day) == 90

    def test_shoulder_temperatures(self):
        assert score_outdoor_sightseeing(make_day(temperature_max=12, weather_code=45)) == 70
        assert score_outdoor_sightseeing(make_day(temperature_max=28, weather_code=45)) == 70

    def test_wet_windy_cold_day_floors_at_zero(self):
        day = make_day(temperature_max=-10, precipitation=12, wind_speed=60, weather_code=63)
        assert score_outdoor_sightseeing(day) == 0


# ---------------------------------------------------------------------------
# Aggregation and ordering
# ---------------------------------------------------------------------------

class TestRankForecastDays:
    def test_all_activities_once_sorted_by_score(self):
        days = [make_day(i, temperature_max=-3, precipitation=6, weather_code=73) for i in range(3)]
        ranked = rank_forecast_days(days)

        assert {a.type for a in ranked} == set(ActivityType)
        assert ranked[0].type is ActivityType.SKIING
        assert [a.score for a in ranked] == sorted((a.score for a in ranked), reverse=True)

    def test_average_is_rounded_half_up(self):
        # skiing: 70, 70, 70, 40 -> 62.5 -> 63
        days = [make_day(i, temperature_max=5, weather_code=3) for i in range(3)]
        days.append(make_day(3, temperature_max=20, weather_code=3, precipitation=6))
        skiing = next(a for a in rank_forecast_days(days) if a.type is ActivityType.SKIING)
        assert skiing.score == 63

    def test_ties_keep_declaration_order(self):
        # tmax 10, dry, calm, cloudy: skiing 50, surfing 50, indoor 60, outdoor 70
        day = make_day(temperature_max=10, precipitation=0, wind_speed=5, weather_code=45)
        ranked = rank_forecast_days([day])

        assert [a.type for a in ranked] == [
            ActivityType.OUTDOOR_SIGHTSEEING,
            ActivityType.INDOOR_SIGHTSEEING,
            ActivityType.SKIING,
            ActivityType.SURFING,
        ]

    def test_reason_mentions_average_temperature(self):
        days = [make_day(0, temperature_max=-4, weather_code=71), make_day(1, temperature_max=-2, weather_code=71)]
        skiing = next(a for a in rank_forecast_days(days) if a.type is ActivityType.SKIING)
        assert skiing.reason == "Excellent skiing conditions with cold temperatures (-3.0°C) and snow"


class TestRankedActivity:
    @pytest.mark.parametrize(
        "score, expected",
        [(100, Suitability.EXCELLENT), (80, Suitability.EXCELLENT), (79, Suitability.GOOD),
         (60, Suitability.GOOD), (40, Suitability.FAIR), (39, Suitability.POOR), (0, Suitability.POOR)],
    )
    def test_suitability_bands(self, score, expected):
        assert suitability_for_score(score) is expected
        assert RankedActivity(ActivityType.SURFING, score, "reason").suitability is expected

    def test_score_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            RankedActivity(ActivityType.SURFING, 101, "reason")

    def test_blank_reason_rejected(self):
        with pytest.raises(ValueError):
            RankedActivity(ActivityType.SURFING, 50, "  ")

    def test_to_dict(self):
        assert RankedActivity(ActivityType.SKIING, 85, "Cold").to_dict() == {
            "type": "SKIING",
            "score": 85,
            "suitability": "EXCELLENT",
            "reason": "Cold",
        }


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class TestActivityRankingService:
    @pytest.fixture
    def weather_service(self) -> AsyncMock:
        fake = AsyncMock()
        fake.get_weather_forecast.return_value = make_forecast()
        return fake

    @pytest.mark.asyncio
    async def test_rank_activities(self, weather_service, metrics):
        service = ActivityRankingService(weather_service, metrics)

        ranked = await service.rank_activities(48.85, 2.35, 3)

        assert len(ranked) == 4
        weather_service.get_weather_forecast.assert_awaited_once_with(48.85, 2.35, 3)
        assert metrics.counter("activity.ranking.requests") == 1

    @pytest.mark.asyncio
    async def test_recommend_for_city_fetches_forecast_once(self, weather_service):
        service = ActivityRankingService(weather_service)
        city = make_city(name="Chamonix", latitude=45.9237, longitude=6.8694)

        payload = await service.recommend_for_city(city, 5)

        weather_service.get_weather_forecast.assert_awaited_once_with(45.9237, 6.8694, 5)
        assert payload["city"]["name"] == "Chamonix"
        assert len(payload["activities"]) == 4
        assert payload["forecast"]["timezone"] == "Europe/Paris"
        assert "generatedAt" in payload
