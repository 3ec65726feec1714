"""OpenWeather API client with retry and rate limit handling."""

import logging
import time

import httpx

logger = logging.getLogger(__name__)

OPENWEATHER_BASE_URL = "https://api.openweathermap.org"
DEFAULT_USER_AGENT = "skychat/0.1.0"


class OpenWeatherClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = OPENWEATHER_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 10.0,
        max_retries: int = 2,
        retry_base_delay: float = 1.0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay

    def get_forecast(
        self, lat: float, lon: float, lang: str = "en", units: str = "metric"
    ) -> dict:
        """Fetch the 5-day / 3-hour forecast (~40 samples)."""
        return self._get(
            "/data/2.5/forecast",
            {"lat": lat, "lon": lon, "units": units, "lang": lang},
        )

    def reverse_geocode(self, lat: float, lon: float, limit: int = 1) -> list:
        return self._get("/geo/1.0/reverse", {"lat": lat, "lon": lon, "limit": limit})

    def _get(self, path: str, params: dict):
        """GET with retries on 503/429 and transport errors, exponential backoff."""
        url = f"{self.base_url}{path}"
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        params = {**params, "appid": self.api_key}

        last_error: Exception | None = None
        for attempt in range(self.max_retries + 1):
            try:
                resp = httpx.get(url, params=params, headers=headers, timeout=self.timeout)
                if resp.status_code in (503, 429) and attempt < self.max_retries:
                    delay = self.retry_base_delay * (2**attempt)
                    logger.warning(
                        "OpenWeather %s returned %d, retrying in %.1fs (attempt %d/%d)",
                        path, resp.status_code, delay, attempt + 1, self.max_retries,
                    )
                    time.sleep(delay)
                    continue
                resp.raise_for_status()
                return resp.json()
            except httpx.RequestError as e:
                last_error = e
                if attempt < self.max_retries:
                    delay = self.retry_base_delay * (2**attempt)
                    logger.warning(
                        "OpenWeather request error, retrying in %.1fs: %s", delay, e
                    )
                    time.sleep(delay)
                    continue
                raise

        assert last_error is not None
        raise last_error
