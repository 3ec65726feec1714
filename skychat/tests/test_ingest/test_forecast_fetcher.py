"""Tests for the OpenWeather forecast fetcher and geocoder."""

from unittest.mock import MagicMock

import httpx
import pytest

from skychat.errors import GeocodeUnavailable, UpstreamUnavailable
from skychat.ingest.forecast_fetcher import (
    OpenWeatherForecastFetcher,
    OpenWeatherGeocoder,
    format_place_name,
    parse_forecast_payload,
)
from skychat.ingest.openweather_client import OpenWeatherClient
from skychat.tests.helpers import owm_item, owm_payload, ts


def _status_error(code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://example.com")
    return httpx.HTTPStatusError(
        "boom", request=request, response=httpx.Response(code, request=request)
    )


class TestParseForecastPayload:
    def test_full_payload(self):
        fetched = parse_forecast_payload(owm_payload(days=5, timezone=32400))
        assert len(fetched.samples) == 40
        assert fetched.timezone_offset_seconds == 32400
        first = fetched.samples[0]
        assert first.timestamp == ts("2026-10-18T00:00:00")
        assert first.temperature == 10.0
        assert first.humidity == 70.0
        assert first.wind_speed == 3.0
        assert first.conditions == ("clear sky",)

    def test_partial_entry_tolerated(self):
        raw = {"list": [{"dt": ts("2026-10-18T00:00:00"), "main": {"temp": 12}}]}
        sample = parse_forecast_payload(raw).samples[0]
        assert sample.temperature == 12.0
        assert sample.temperature_min is None
        assert sample.wind_speed is None
        assert sample.precipitation_probability is None
        assert sample.conditions == ()

    def test_non_numeric_fields_dropped(self):
        item = owm_item("2026-10-18T00:00:00", temp="warm", humidity=True)
        sample = parse_forecast_payload({"list": [item]}).samples[0]
        assert sample.temperature is None
        assert sample.humidity is None

    def test_entry_without_timestamp_skipped(self):
        raw = {"list": [{"main": {"temp": 1}}, owm_item("2026-10-18T03:00:00")]}
        assert len(parse_forecast_payload(raw).samples) == 1

    def test_missing_list_and_city(self):
        fetched = parse_forecast_payload({})
        assert fetched.samples == []
        assert fetched.timezone_offset_seconds is None

    def test_pop_and_multiple_conditions(self):
        item = owm_item("2026-10-18T00:00:00", pop=0.35, description="light rain")
        item["weather"].append({"description": "mist"})
        sample = parse_forecast_payload({"list": [item]}).samples[0]
        assert sample.precipitation_probability == 0.35
        assert sample.conditions == ("light rain", "mist")

    def test_non_object_body(self):
        with pytest.raises(UpstreamUnavailable):
            parse_forecast_payload([])


class TestOpenWeatherForecastFetcher:
    def test_fetch_passes_language(self):
        client = MagicMock(spec=OpenWeatherClient)
        client.get_forecast.return_value = owm_payload(days=1)
        fetched = OpenWeatherForecastFetcher(client).fetch(1.0, 2.0, "ja")
        client.get_forecast.assert_called_once_with(1.0, 2.0, lang="ja", units="metric")
        assert len(fetched.samples) == 8

    def test_http_status_error_wrapped(self):
        client = MagicMock(spec=OpenWeatherClient)
        client.get_forecast.side_effect = _status_error(401)
        with pytest.raises(UpstreamUnavailable) as exc:
            OpenWeatherForecastFetcher(client).fetch(1.0, 2.0)
        assert exc.value.status_code == 401

    def test_timeout_wrapped(self):
        client = MagicMock(spec=OpenWeatherClient)
        client.get_forecast.side_effect = httpx.ReadTimeout("slow")
        with pytest.raises(UpstreamUnavailable):
            OpenWeatherForecastFetcher(client).fetch(1.0, 2.0)


class TestOpenWeatherGeocoder:
    def test_full_name(self):
        client = MagicMock(spec=OpenWeatherClient)
        client.reverse_geocode.return_value = [
            {"name": "Shibuya", "state": "Tokyo", "country": "JP"}
        ]
        assert OpenWeatherGeocoder(client).reverse_geocode(35.66, 139.7) == "Shibuya, Tokyo, JP"

    def test_empty_result(self):
        client = MagicMock(spec=OpenWeatherClient)
        client.reverse_geocode.return_value = []
        assert OpenWeatherGeocoder(client).reverse_geocode(0, 0) is None

    def test_failure_is_geocode_unavailable(self):
        client = MagicMock(spec=OpenWeatherClient)
        client.reverse_geocode.side_effect = httpx.ConnectError("down")
        with pytest.raises(GeocodeUnavailable):
            OpenWeatherGeocoder(client).reverse_geocode(0, 0)

    def test_format_place_name_partial(self):
        assert format_place_name({"name": "Reykjavik", "country": "IS"}) == "Reykjavik, IS"
        assert format_place_name({}) is None
