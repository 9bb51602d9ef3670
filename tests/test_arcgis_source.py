"""Tests for the ArcGIS basin-model client and remote value source."""
import json

import httpx
import pytest
from unittest.mock import AsyncMock, patch

from basin_service.basin.models import BasinModel, Coordinate, SourceType
from basin_service.data_sources.arcgis_client import (
    ArcGisClient, ArcGisConfig, parse_identify_response
)
from basin_service.data_sources.arcgis_source import RemoteModelSource, to_km
from basin_service.exceptions import UpstreamUnavailable

TEST_HOST = "https://arcgis.example.org"


def identify_response(status_code=200, payload=None, text=None):
    request = httpx.Request("GET", f"{TEST_HOST}/identify")
    if text is not None:
        return httpx.Response(status_code, text=text, request=request)
    return httpx.Response(status_code, json=payload, request=request)


def identify_payload(**pixel_values):
    return {
        "results": [
            {"layerId": i, "layerName": key, "attributes": {"Pixel Value": value}}
            for i, (key, value) in enumerate(pixel_values.items())
        ]
    }


class TestArcGisConfig:

    def test_url_joins_host_and_path(self):
        config = ArcGisConfig(host=TEST_HOST + "/", service_path="/arcgis/rest/services/basins/MapServer/identify")
        assert config.url == f"{TEST_HOST}/arcgis/rest/services/basins/MapServer/identify"

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError):
            ArcGisConfig(host=TEST_HOST, timeout=0)


class TestParseIdentifyResponse:

    def test_pixel_values(self):
        values = parse_identify_response(identify_payload(seattle_z1p0="480.5", seattle_z2p5=5120))
        assert values == {"seattle_z1p0": 480.5, "seattle_z2p5": 5120.0}

    @pytest.mark.parametrize("no_data", ["NoData", "", None, "NaN"])
    def test_no_data_is_none(self, no_data):
        assert parse_identify_response(identify_payload(seattle_z1p0=no_data)) == {"seattle_z1p0": None}

    def test_service_error_payload(self):
        with pytest.raises(UpstreamUnavailable, match="Invalid or missing input parameters"):
            parse_identify_response({"error": {"code": 400, "message": "Invalid or missing input parameters."}})

    @pytest.mark.parametrize("payload", [[], "oops", {"features": []}])
    def test_unexpected_payload(self, payload):
        with pytest.raises(UpstreamUnavailable):
            parse_identify_response(payload)


@pytest.mark.asyncio
class TestArcGisClient:

    async def test_query_sends_point_identify(self):
        client = ArcGisClient(ArcGisConfig(host=TEST_HOST))
        with patch.object(client.client, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = identify_response(payload=identify_payload(seattle_z2p5="100"))

            values = await client.query(Coordinate(47.6, -122.3))

        assert values == {"seattle_z2p5": 100.0}
        url = mock_get.call_args.args[0]
        params = mock_get.call_args.kwargs["params"]
        assert url == client.config.url
        assert json.loads(params["geometry"])["x"] == -122.3
        assert json.loads(params["geometry"])["y"] == 47.6
        assert params["geometryType"] == "esriGeometryPoint"
        assert params["f"] == "json"
        await client.close()

    async def test_error_classification(self):
        client = ArcGisClient(ArcGisConfig(host=TEST_HOST, timeout=2.5))
        coordinate = Coordinate(47.6, -122.3)

        with patch.object(client.client, "get", new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = httpx.ReadTimeout("read timed out")
            with pytest.raises(UpstreamUnavailable) as exc_info:
                await client.query(coordinate)
            assert exc_info.value.timed_out
            assert exc_info.value.timeout_seconds == 2.5

            mock_get.side_effect = httpx.ConnectError("connection refused")
            with pytest.raises(UpstreamUnavailable, match="connection refused") as exc_info:
                await client.query(coordinate)
            assert not exc_info.value.timed_out

            mock_get.side_effect = None
            mock_get.return_value = identify_response(status_code=503, payload={})
            with pytest.raises(UpstreamUnavailable, match="HTTP 503"):
                await client.query(coordinate)

            mock_get.return_value = identify_response(text="<html>maintenance</html>")
            with pytest.raises(UpstreamUnavailable, match="invalid JSON"):
                await client.query(coordinate)

        await client.close()

    async def test_close_releases_client(self):
        client = ArcGisClient(ArcGisConfig(host=TEST_HOST))
        http_client = client.client
        assert client.client is http_client
        await client.close()
        assert client._client is None
        assert http_client.is_closed


@pytest.mark.asyncio
class TestRemoteModelSource:

    async def test_fetch_converts_millimeters(self, remote_source, mock_arcgis_client):
        raw = await remote_source.fetch(Coordinate(47.6, -122.3), BasinModel.SEATTLE)
        assert raw.z1p0 == pytest.approx(0.48)
        assert raw.z2p5 == pytest.approx(5.12)
        assert raw.source_type is SourceType.REMOTE

    async def test_fetch_null_and_missing_fields(self, remote_source):
        raw = await remote_source.fetch(Coordinate(12.0, -8.0), BasinModel.CCA06)
        assert raw.z1p0 is None
        assert raw.z2p5 == pytest.approx(2.1)

        raw = await remote_source.fetch(Coordinate(12.0, -8.0), BasinModel.WASATCH)
        assert raw.z1p0 is None
        assert raw.z2p5 is None

    async def test_unconfigured_source_is_unavailable(self):
        source = RemoteModelSource(None)
        assert not source.configured
        with pytest.raises(UpstreamUnavailable, match="not configured"):
            await source.fetch(Coordinate(47.6, -122.3), BasinModel.SEATTLE)

    async def test_upstream_errors_propagate(self, remote_source, mock_arcgis_client):
        mock_arcgis_client.query.side_effect = UpstreamUnavailable("ArcGIS basin service", "HTTP 500")
        with pytest.raises(UpstreamUnavailable, match="HTTP 500"):
            await remote_source.fetch(Coordinate(47.6, -122.3), BasinModel.SEATTLE)


def test_to_km():
    assert to_km(100.0) == 0.1
    assert to_km(None) is None
    assert to_km(0.0) == 0.0
