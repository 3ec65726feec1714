"""Forecast fetcher and reverse geocoder backed by OpenWeather.

Both translate transport and HTTP failures into the core's error types:
the fetcher raises UpstreamUnavailable (terminal), the geocoder raises
GeocodeUnavailable (recoverable).
"""

import logging
from typing import Protocol

import httpx

from skychat.errors import GeocodeUnavailable, UpstreamUnavailable
from skychat.ingest.openweather_client import OpenWeatherClient
from skychat.models.forecast import FetchedForecast, RawSample

logger = logging.getLogger(__name__)


class ForecastFetcher(Protocol):
    def fetch(self, lat: float, lon: float, lang: str | None = None) -> FetchedForecast: ...


class Geocoder(Protocol):
    def reverse_geocode(self, lat: float, lon: float) -> str | None: ...


class OpenWeatherForecastFetcher:
    def __init__(self, client: OpenWeatherClient, units: str = "metric"):
        self.client = client
        self.units = units

    def fetch(self, lat: float, lon: float, lang: str | None = None) -> FetchedForecast:
        try:
            raw = self.client.get_forecast(lat, lon, lang=lang or "en", units=self.units)
        except httpx.HTTPStatusError as e:
            raise UpstreamUnavailable(
                f"OpenWeather forecast error: {e.response.status_code}",
                e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"OpenWeather forecast request failed: {e}") from e
        except ValueError as e:
            raise UpstreamUnavailable(f"OpenWeather forecast body is not JSON: {e}") from e
        return parse_forecast_payload(raw)


class OpenWeatherGeocoder:
    def __init__(self, client: OpenWeatherClient):
        self.client = client

    def reverse_geocode(self, lat: float, lon: float) -> str | None:
        try:
            results = self.client.reverse_geocode(lat, lon, limit=1)
        except (httpx.HTTPError, ValueError) as e:
            raise GeocodeUnavailable(f"Reverse geocoding failed: {e}") from e
        if not isinstance(results, list) or not results:
            return None
        return format_place_name(results[0])


def format_place_name(place: dict) -> str | None:
    """'name, state, country' using whichever parts are present."""
    if not isinstance(place, dict):
        return None
    parts = [place.get(k) for k in ("name", "state", "country")]
    parts = [p for p in parts if isinstance(p, str) and p]
    return ", ".join(parts) or None


def parse_forecast_payload(raw: dict) -> FetchedForecast:
    """Convert a /data/2.5/forecast body into typed samples."""
    if not isinstance(raw, dict):
        raise UpstreamUnavailable("OpenWeather forecast body is not an object")

    items = raw.get("list")
    if not isinstance(items, list):
        items = []

    samples: list[RawSample] = []
    skipped = 0
    for item in items:
        sample = _parse_sample(item)
        if sample is None:
            skipped += 1
            continue
        samples.append(sample)
    if skipped:
        logger.warning("Skipped %d forecast entries without a timestamp", skipped)

    city = raw.get("city") if isinstance(raw.get("city"), dict) else {}
    offset = _number(city.get("timezone"))
    return FetchedForecast(
        samples=samples,
        timezone_offset_seconds=int(offset) if offset is not None else None,
    )


def _parse_sample(item) -> RawSample | None:
    if not isinstance(item, dict):
        return None
    ts = _number(item.get("dt"))
    if ts is None:
        return None
    main = item.get("main") if isinstance(item.get("main"), dict) else {}
    wind = item.get("wind") if isinstance(item.get("wind"), dict) else {}
    weather = item.get("weather") if isinstance(item.get("weather"), list) else []

    conditions = tuple(
        w["description"] for w in weather
        if isinstance(w, dict) and isinstance(w.get("description"), str)
    )
    return RawSample(
        timestamp=int(ts),
        temperature=_number(main.get("temp")),
        temperature_min=_number(main.get("temp_min")),
        temperature_max=_number(main.get("temp_max")),
        humidity=_number(main.get("humidity")),
        wind_speed=_number(wind.get("speed")),
        precipitation_probability=_number(item.get("pop")),
        conditions=conditions,
    )


def _number(value) -> float | None:
    # bool is an int subclass but never a measurement
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value != value or value in (float("inf"), float("-inf")):
        return None
    return float(value)
