"""Forecast orchestration: cache lookup, upstream fetch, aggregation, cache fill."""

import logging
import math
import os
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager

from skychat.aggregation.bucketer import bucket_by_day, earliest_days
from skychat.aggregation.day_aggregator import aggregate_day
from skychat.config.loader import resolve_api_key
from skychat.config.schema import AppConfig
from skychat.errors import (
    ConfigurationMissing,
    GeocodeUnavailable,
    InvalidInput,
    UpstreamUnavailable,
)
from skychat.ingest.forecast_fetcher import (
    ForecastFetcher,
    Geocoder,
    OpenWeatherForecastFetcher,
    OpenWeatherGeocoder,
)
from skychat.ingest.openweather_client import OpenWeatherClient
from skychat.models.common import Language, normalize_language
from skychat.models.forecast import ForecastResult
from skychat.storage.forecast_cache import ForecastCache, forecast_cache_key

logger = logging.getLogger(__name__)

LOCK_POLL_SECONDS = 0.05


def parse_coordinates(lat, lon) -> tuple[float, float]:
    """Parse and range-check a latitude/longitude pair."""
    lat_f = _parse_coord(lat, "latitude")
    lon_f = _parse_coord(lon, "longitude")
    if not -90.0 <= lat_f <= 90.0:
        raise InvalidInput(f"latitude out of range: {lat_f}")
    if not -180.0 <= lon_f <= 180.0:
        raise InvalidInput(f"longitude out of range: {lon_f}")
    return lat_f, lon_f


def _parse_coord(value, name: str) -> float:
    if value is None or isinstance(value, bool):
        raise InvalidInput(f"{name} is missing")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise InvalidInput(f"{name} is missing")
    try:
        parsed = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"{name} is not a number: {value!r}") from e
    if not math.isfinite(parsed):
        raise InvalidInput(f"{name} is not finite: {value!r}")
    return parsed


def fallback_location(lat: float, lon: float) -> str:
    return f"{lat:.2f}, {lon:.2f}"


class ForecastOrchestrator:
    """Public entry point of the forecast core.

    ``get_forecast`` returns a ForecastResult or None and never raises. Geocoder
    failures degrade to a coordinate label; fetch failures, a missing credential
    and invalid input all yield None.
    """

    def __init__(
        self,
        fetcher: ForecastFetcher,
        geocoder: Geocoder,
        cache: ForecastCache,
        config: AppConfig | None = None,
        api_key: str | None = None,
    ):
        self.fetcher = fetcher
        self.geocoder = geocoder
        self.cache = cache
        self.config = config or AppConfig()
        self.api_key = api_key
        self._inflight: dict[str, list] = {}  # key -> [lock, waiters]
        self._inflight_guard = threading.Lock()
        if not api_key:
            logger.warning(
                "%s is not set; forecasts will be unavailable",
                self.config.upstream.api_key_env,
            )

    def get_forecast(
        self,
        lat,
        lon,
        language: str | None = None,
        cancel: threading.Event | None = None,
    ) -> ForecastResult | None:
        try:
            lat_f, lon_f = parse_coordinates(lat, lon)
        except InvalidInput as e:
            logger.info("Rejected forecast request: %s", e)
            return None

        if _cancelled(cancel):
            logger.info("Forecast request cancelled before lookup")
            return None

        key = forecast_cache_key(lat_f, lon_f, self.config.cache.key_precision)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        lang = normalize_language(language, self.config.forecast.default_language)
        with self._key_lock(key, cancel) as acquired:
            if not acquired or _cancelled(cancel):
                logger.info("Forecast request cancelled while waiting for %s", key)
                return None
            # Another request may have filled the entry while we waited
            cached = self.cache.get(key)
            if cached is not None:
                return cached
            try:
                result = self._build(lat_f, lon_f, lang, cancel)
            except ConfigurationMissing as e:
                logger.error("Forecast unavailable: %s", e)
                return None
            except UpstreamUnavailable as e:
                logger.error("Forecast fetch failed for %s: %s", key, e)
                return None
            except Exception:
                logger.exception("Unexpected error building forecast for %s", key)
                return None
            if result is None:
                return None
            self.cache.set(key, result)
            return result

    def _build(
        self,
        lat: float,
        lon: float,
        lang: Language,
        cancel: threading.Event | None,
    ) -> ForecastResult | None:
        if not self.api_key:
            raise ConfigurationMissing(f"{self.config.upstream.api_key_env} is not set")
        if _cancelled(cancel):
            logger.info("Forecast request cancelled before fetch")
            return None

        location = self._resolve_location(lat, lon)
        fetched = self.fetcher.fetch(lat, lon, lang.value)

        if _cancelled(cancel):
            logger.info("Forecast request cancelled; discarding fetched data")
            return None

        offset = fetched.timezone_offset_seconds
        buckets = bucket_by_day(fetched.samples, offset)
        days = earliest_days(buckets, self.config.forecast.max_days)
        daily = tuple(aggregate_day(day, samples) for day, samples in days)
        logger.debug(
            "Aggregated %d samples into %d days", len(fetched.samples), len(daily)
        )

        return ForecastResult(
            location=location,
            lat=lat,
            lon=lon,
            daily=daily,
            source=self.config.forecast.source,
            timezone_offset_seconds=offset,
        )

    def _resolve_location(self, lat: float, lon: float) -> str:
        try:
            name = self.geocoder.reverse_geocode(lat, lon)
        except GeocodeUnavailable as e:
            logger.warning("Reverse geocoding failed, using coordinates: %s", e)
            name = None
        except Exception as e:
            logger.warning(
                "Reverse geocoding raised %s, using coordinates: %s", type(e).__name__, e
            )
            name = None
        return name or fallback_location(lat, lon)

    @contextmanager
    def _key_lock(
        self, key: str, cancel: threading.Event | None = None
    ) -> Iterator[bool]:
        """Serialise fetches per cache key; the lock is dropped with its last waiter.

        Yields False if ``cancel`` was set before the lock could be taken.
        """
        with self._inflight_guard:
            slot = self._inflight.setdefault(key, [threading.Lock(), 0])
            slot[1] += 1
        acquired = False
        try:
            while not acquired:
                acquired = slot[0].acquire(timeout=LOCK_POLL_SECONDS)
                if not acquired and _cancelled(cancel):
                    break
            yield acquired
        finally:
            if acquired:
                slot[0].release()
            with self._inflight_guard:
                slot[1] -= 1
                if slot[1] == 0:
                    del self._inflight[key]


def _cancelled(cancel: threading.Event | None) -> bool:
    return cancel is not None and cancel.is_set()


def build_orchestrator(
    config: AppConfig | None = None,
    environ: Mapping[str, str] | None = None,
    cache: ForecastCache | None = None,
) -> ForecastOrchestrator:
    """Wire the OpenWeather collaborators and a fresh cache."""
    config = config or AppConfig()
    api_key = resolve_api_key(config, environ if environ is not None else os.environ)
    up = config.upstream
    client = OpenWeatherClient(
        api_key=api_key or "",
        base_url=up.base_url,
        user_agent=up.user_agent,
        timeout=up.timeout_seconds,
        max_retries=up.max_retries,
        retry_base_delay=up.retry_base_delay,
    )
    return ForecastOrchestrator(
        fetcher=OpenWeatherForecastFetcher(client, units=config.forecast.units),
        geocoder=OpenWeatherGeocoder(client),
        cache=cache or ForecastCache(ttl_seconds=config.cache.ttl_seconds),
        config=config,
        api_key=api_key,
    )
