"""
Tests for weather classification and enrichment.
"""

from unittest.mock import AsyncMock

import pytest

from pescador.exceptions import UpstreamError
from pescador.models import Coordinate
from pescador.weather import (
    COMPASS_POINTS,
    OpenWeatherClient,
    classify_clouds,
    enrich_weather,
    wind_direction,
)

from .payloads import make_response, onecall_payload


class TestClassifyClouds:
    """Test cloud cover buckets."""

    @pytest.mark.parametrize(
        "cloudiness,label",
        [
            (0, "Clear skies"),
            (1, "Mostly sunny"),
            (25, "Mostly sunny"),
            (26, "Partly cloudy"),
            (50, "Partly cloudy"),
            (51, "Mostly cloudy"),
            (75, "Mostly cloudy"),
            (76, "Overcast"),
            (100, "Overcast"),
        ],
    )
    def test_bucket_boundaries(self, cloudiness, label):
        assert classify_clouds(cloudiness) == label

    def test_monotonic(self):
        order = ["Clear skies", "Mostly sunny", "Partly cloudy", "Mostly cloudy", "Overcast"]
        ranks = [order.index(classify_clouds(pct)) for pct in range(0, 101)]
        assert ranks == sorted(ranks)


class TestWindDirection:
    """Test 16-point compass mapping."""

    @pytest.mark.parametrize(
        "degrees,label",
        [
            (0, "N"),
            (11.24, "N"),
            (11.25, "NNE"),
            (45, "NE"),
            (90, "E"),
            (135, "SE"),
            (180, "S"),
            (270, "W"),
            (348.74, "NNW"),
            (348.75, "N"),
            (359.9, "N"),
            (360, "N"),
            (-22.5, "NNW"),
            (405, "NE"),
        ],
    )
    def test_labels(self, degrees, label):
        assert wind_direction(degrees) == label

    def test_each_label_centred_on_its_bearing(self):
        for i, label in enumerate(COMPASS_POINTS):
            assert wind_direction(i * 22.5) == label


class TestEnrichWeather:
    """Test enrich_weather."""

    def test_full_payload(self):
        weather = enrich_weather(onecall_payload())

        assert weather.temperature == 78.4
        assert weather.wind.speed == 8.1
        assert weather.wind.direction == "SE"
        assert weather.wind.gust == 14.2
        assert weather.pressure == 1012
        assert weather.humidity == 64
        assert weather.cloud_cover_label == "Partly cloudy"
        assert weather.sunrise == 1714563000
        assert weather.condition.main == "Clouds"
        assert weather.condition.description == "scattered clouds"

    def test_gust_optional(self):
        payload = onecall_payload()
        del payload["current"]["wind_gust"]

        assert enrich_weather(payload).wind.gust is None

    def test_missing_condition_description(self):
        assert enrich_weather(onecall_payload(weather=[])).condition is None

    def test_missing_current_section(self):
        with pytest.raises(UpstreamError, match="no current conditions"):
            enrich_weather({"lat": 30.24, "lon": -97.77})

    def test_incomplete_current_section(self):
        payload = onecall_payload()
        del payload["current"]["temp"]

        with pytest.raises(UpstreamError, match="incomplete"):
            enrich_weather(payload)

    def test_record_is_immutable(self):
        weather = enrich_weather(onecall_payload())
        with pytest.raises(AttributeError):
            weather.temperature = 0  # type: ignore[misc]


class TestOpenWeatherClient:
    """Test OpenWeatherClient."""

    @pytest.mark.asyncio
    async def test_get_current_params(self, config):
        client = OpenWeatherClient(config)
        mock_client = AsyncMock()
        mock_client.get.return_value = make_response(onecall_payload())
        client._client = mock_client

        data = await client.get_current(Coordinate(30.24, -97.77))

        assert data["current"]["temp"] == 78.4
        url = mock_client.get.call_args[0][0]
        params = mock_client.get.call_args[1]["params"]
        assert url == "https://api.openweathermap.org/data/3.0/onecall"
        assert params["lat"] == 30.24
        assert params["lon"] == -97.77
        assert params["units"] == "imperial"
        assert params["appid"] == "test-openweather"

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        client = OpenWeatherClient()
        client._client = AsyncMock()

        with pytest.raises(UpstreamError, match="API key"):
            await client.get_current(Coordinate(30.24, -97.77))

        client._client.get.assert_not_called()
