"""
Tests for the upstream HTTP clients.
"""

import json
from decimal import Decimal
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from pescador.client import BaseClient
from pescador.exceptions import (
    AmbiguousMatch,
    InvalidQuery,
    MalformedRequest,
    NoMatchError,
    UpstreamError,
    UpstreamTimeout,
)
from pescador.geocode import GeocodeResolver, MapQuestClient, parse_geocode_payload
from pescador.models import BoundingBox, Coordinate, LocationOptions, SingleLocation
from pescador.usgs import USGSClient, parse_time_series

from .payloads import (
    make_response,
    mapquest_location,
    mapquest_payload,
    usgs_entry,
    usgs_payload,
)


def status_response(status: int) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", "http://upstream.test"))


def mock_transport(client: BaseClient) -> AsyncMock:
    mock_client = AsyncMock()
    client._client = mock_client
    return mock_client


class TestBaseClient:
    """Test retry and error translation."""

    @pytest.mark.asyncio
    async def test_success(self, config):
        client = BaseClient(config)
        transport = mock_transport(client)
        transport.get.return_value = make_response({"ok": True})

        assert await client._make_request("http://upstream.test", {"a": 1}) == {"ok": True}
        transport.get.assert_called_once_with("http://upstream.test", params={"a": 1})

    @pytest.mark.asyncio
    async def test_timeout_retried_then_succeeds(self, config):
        client = BaseClient(config)
        transport = mock_transport(client)
        transport.get.side_effect = [
            httpx.ReadTimeout("timed out"),
            make_response({"ok": True}),
        ]

        assert await client._make_request("http://upstream.test") == {"ok": True}
        assert transport.get.call_count == 2

    @pytest.mark.asyncio
    async def test_persistent_timeout(self, config):
        client = BaseClient(config)
        transport = mock_transport(client)
        transport.get.side_effect = httpx.ReadTimeout("timed out")

        with pytest.raises(UpstreamTimeout, match="request timeout after"):
            await client._make_request("http://upstream.test")

        assert transport.get.call_count == config.max_retries + 1

    @pytest.mark.asyncio
    async def test_timeout_is_upstream_error(self, config):
        client = BaseClient(config.with_overrides(max_retries=0))
        mock_transport(client).get.side_effect = httpx.ConnectTimeout("timed out")

        with pytest.raises(UpstreamError) as exc_info:
            await client._make_request("http://upstream.test")

        assert exc_info.value.kind == "upstream_timeout"

    @pytest.mark.asyncio
    async def test_server_error_retried(self, config):
        client = BaseClient(config)
        transport = mock_transport(client)
        transport.get.side_effect = [status_response(503), make_response({"ok": True})]

        assert await client._make_request("http://upstream.test") == {"ok": True}
        assert transport.get.call_count == 2

    @pytest.mark.asyncio
    async def test_server_error_exhausts_retries(self, config):
        client = BaseClient(config)
        transport = mock_transport(client)
        transport.get.return_value = status_response(502)

        with pytest.raises(UpstreamError, match="temporarily unavailable"):
            await client._make_request("http://upstream.test")

        assert transport.get.call_count == 3

    @pytest.mark.asyncio
    async def test_rate_limit(self, config):
        client = BaseClient(config.with_overrides(max_retries=0))
        mock_transport(client).get.return_value = status_response(429)

        with pytest.raises(UpstreamError, match="rate limit"):
            await client._make_request("http://upstream.test")

    @pytest.mark.asyncio
    async def test_not_found_is_not_retried(self, config):
        client = BaseClient(config)
        transport = mock_transport(client)
        transport.get.return_value = status_response(404)

        with pytest.raises(UpstreamError, match="not found"):
            await client._make_request("http://upstream.test")

        assert transport.get.call_count == 1

    @pytest.mark.asyncio
    async def test_network_error(self, config):
        client = BaseClient(config)
        transport = mock_transport(client)
        transport.get.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(UpstreamError, match="network error"):
            await client._make_request("http://upstream.test")

        assert transport.get.call_count == 1

    @pytest.mark.asyncio
    async def test_invalid_json(self, config):
        client = BaseClient(config)
        response = Mock()
        response.raise_for_status.return_value = None
        response.json.side_effect = json.JSONDecodeError("Expecting value", "", 0)
        mock_transport(client).get.return_value = response

        with pytest.raises(UpstreamError, match="invalid JSON"):
            await client._make_request("http://upstream.test")

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, config):
        client = BaseClient(config)
        transport = mock_transport(client)

        async with client:
            pass

        transport.aclose.assert_awaited_once()


class TestMapQuestClient:
    """Test MapQuestClient and payload parsing."""

    @pytest.mark.asyncio
    async def test_geocode_request(self, config):
        client = MapQuestClient(config)
        transport = mock_transport(client)
        transport.get.return_value = make_response(
            mapquest_payload(mapquest_location("Austin", "TX", "Travis", 30.24, -97.77))
        )

        await client.geocode("78704")

        url = transport.get.call_args[0][0]
        params = transport.get.call_args[1]["params"]
        assert url == "http://www.mapquestapi.com/geocoding/v1/address"
        assert params == {"key": "test-mapquest", "location": "78704"}

    @pytest.mark.asyncio
    async def test_status_code_400_in_body(self, config):
        client = MapQuestClient(config)
        mock_transport(client).get.return_value = make_response(mapquest_payload(status=400))

        with pytest.raises(InvalidQuery, match="Invalid query"):
            await client.geocode("!!")

    @pytest.mark.asyncio
    async def test_http_400(self, config):
        client = MapQuestClient(config)
        mock_transport(client).get.return_value = status_response(400)

        with pytest.raises(InvalidQuery):
            await client.geocode("!!")

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        client = MapQuestClient()
        transport = mock_transport(client)

        with pytest.raises(UpstreamError, match="API key"):
            await client.geocode("78704")

        transport.get.assert_not_called()

    def test_single_location(self):
        result = parse_geocode_payload(
            mapquest_payload(mapquest_location("Austin", "TX", "Travis", 30.24, -97.77))
        )

        assert isinstance(result, SingleLocation)
        assert result.kind == "single"
        assert result.coordinate == Coordinate(30.24, -97.77)
        assert result.county == "Travis"

    def test_multiple_locations_become_options(self):
        result = parse_geocode_payload(
            mapquest_payload(
                mapquest_location("Springfield", "IL", "Sangamon", 39.78, -89.65),
                mapquest_location("Springfield", "MO", "Greene", 37.21, -93.29),
                mapquest_location("Springfield", "MA", "Hampden", 42.10, -72.59),
            )
        )

        assert isinstance(result, LocationOptions)
        assert result.kind == "options"
        assert [o.display for o in result.options] == [
            "Springfield, IL (Sangamon)",
            "Springfield, MO (Greene)",
            "Springfield, MA (Hampden)",
        ]
        assert result.options[1].coordinate == Coordinate(37.21, -93.29)

    def test_no_locations(self):
        with pytest.raises(NoMatchError):
            parse_geocode_payload(mapquest_payload())

    def test_location_without_coordinates(self):
        payload = mapquest_payload({"adminArea5": "Austin"})
        with pytest.raises(UpstreamError, match="coordinates"):
            parse_geocode_payload(payload)


class TestGeocodeResolver:
    """Test GeocodeResolver."""

    @pytest.mark.asyncio
    async def test_blank_query_makes_no_call(self):
        client = AsyncMock()
        resolver = GeocodeResolver(client)

        with pytest.raises(MalformedRequest):
            await resolver.resolve("   ")

        client.geocode.assert_not_called()

    @pytest.mark.asyncio
    async def test_query_is_stripped(self):
        client = AsyncMock()
        client.geocode.return_value = mapquest_payload(
            mapquest_location("Austin", "TX", "Travis", 30.24, -97.77)
        )

        result = await GeocodeResolver(client).resolve("  78704 ")

        client.geocode.assert_awaited_once_with("78704")
        assert isinstance(result, SingleLocation)

    @pytest.mark.asyncio
    async def test_resolve_coordinate(self):
        client = AsyncMock()
        client.geocode.return_value = mapquest_payload(
            mapquest_location("Austin", "TX", "Travis", 30.24, -97.77)
        )

        assert await GeocodeResolver(client).resolve_coordinate("78704") == Coordinate(
            30.24, -97.77
        )

    @pytest.mark.asyncio
    async def test_resolve_coordinate_ambiguous(self):
        client = AsyncMock()
        client.geocode.return_value = mapquest_payload(
            mapquest_location("Portland", "OR", "Multnomah", 45.52, -122.68),
            mapquest_location("Portland", "ME", "Cumberland", 43.66, -70.26),
        )

        with pytest.raises(AmbiguousMatch) as exc_info:
            await GeocodeResolver(client).resolve_coordinate("Portland")

        error = exc_info.value.to_dict()
        assert error["kind"] == "ambiguous_match"
        assert len(error["options"]) == 2


class TestUSGSClient:
    """Test USGSClient requests and Water Services parsing."""

    BOX = BoundingBox(
        west=Decimal("-97.937"),
        north=Decimal("30.384"),
        south=Decimal("30.095"),
        east=Decimal("-97.602"),
    )

    @pytest.mark.asyncio
    async def test_sites_in_box_request(self, config):
        client = USGSClient(config)
        transport = mock_transport(client)
        transport.get.return_value = make_response(
            usgs_payload(usgs_entry("Barton Creek", "08155500", "ST", "00060", [22.0]))
        )

        records = await client.get_sites_in_box(self.BOX)

        params = transport.get.call_args[1]["params"]
        assert transport.get.call_args[0][0] == "http://waterservices.usgs.gov/nwis/iv"
        assert params["bBox"] == "-97.937,30.095,-97.602,30.384"
        assert params["parameterCd"] == "00060,00065"
        assert params["siteType"] == "LK,ST"
        assert params["siteStatus"] == "active"
        assert params["format"] == "json"
        assert len(records) == 1
        assert records[0].site_code == "08155500"

    @pytest.mark.asyncio
    async def test_station_history_request(self, config):
        client = USGSClient(config)
        transport = mock_transport(client)
        transport.get.return_value = make_response(usgs_payload())

        assert await client.get_station_history("08155500", 7) == []

        params = transport.get.call_args[1]["params"]
        assert params["sites"] == "08155500"
        assert params["period"] == "P7D"

    @pytest.mark.asyncio
    async def test_station_history_rejects_zero_days(self, config):
        client = USGSClient(config)
        transport = mock_transport(client)

        with pytest.raises(ValueError):
            await client.get_station_history("08155500", 0)

        transport.get.assert_not_called()

    def test_parse_entry_fields(self):
        records = parse_time_series(
            usgs_payload(
                usgs_entry("Lake Travis at Mansfield Dam", "08154500", "LK", "00065", [681.2, 681.3])
            )
        )

        lake = records[0]
        assert lake.site_name == "Lake Travis at Mansfield Dam"
        assert lake.is_lake
        assert lake.is_gage_height
        assert not lake.is_flow_rate
        assert [v.value for v in lake.values] == [681.2, 681.3]
        assert lake.values[0].timestamp.startswith("2024-05-01T00:00")
        assert lake.coordinate == Coordinate(30.26, -97.78)

    def test_no_data_sentinel_becomes_none(self):
        records = parse_time_series(
            usgs_payload(usgs_entry("Onion Ck", "08159000", "ST", "00060", [-999999.0, 4.5]))
        )
        assert [v.value for v in records[0].values] == [None, 4.5]

    def test_malformed_entries_skipped(self):
        good = usgs_entry("Onion Ck", "08159000", "ST", "00060", [4.5])
        bad = usgs_entry("Bull Ck", "08154700", "ST", "00060", [1.0])
        del bad["sourceInfo"]["geoLocation"]

        records = parse_time_series(usgs_payload(bad, good))

        assert [r.site_name for r in records] == ["Onion Ck"]

    @pytest.mark.parametrize("payload", [{}, {"value": {}}, None, []])
    def test_missing_time_series(self, payload):
        with pytest.raises(UpstreamError, match="timeSeries"):
            parse_time_series(payload)
