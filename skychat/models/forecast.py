"""Forecast data models: raw upstream samples and daily aggregates."""

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class RawSample:
    """One sub-daily upstream measurement. Every measurement may be absent."""

    timestamp: int
    temperature: float | None = None
    temperature_min: float | None = None
    temperature_max: float | None = None
    humidity: float | None = None
    wind_speed: float | None = None
    precipitation_probability: float | None = None  # 0..1
    conditions: tuple[str, ...] = ()

    @property
    def primary_condition(self) -> str | None:
        if self.conditions and self.conditions[0]:
            return self.conditions[0]
        return None


@dataclass(frozen=True)
class DailyAggregate:
    date: date
    temp_avg: float | None
    temp_min: float | None
    temp_max: float | None
    description: str
    humidity_avg: int | None
    wind_speed_avg: float | None
    pop_max: float | None


@dataclass(frozen=True)
class FetchedForecast:
    samples: list[RawSample]
    timezone_offset_seconds: int | None = None


@dataclass(frozen=True)
class ForecastResult:
    location: str
    lat: float
    lon: float
    daily: tuple[DailyAggregate, ...] = field(default_factory=tuple)
    source: str = "openweathermap-forecast"
    timezone_offset_seconds: int | None = None
