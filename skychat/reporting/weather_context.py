"""Formatters that turn a ForecastResult into chat prompt context or JSON."""

import json

from skychat.models.forecast import DailyAggregate, ForecastResult

CONTEXT_HEADER = "5-day forecast summary:"


def format_day_line(d: DailyAggregate) -> str:
    pop = f"{round(d.pop_max * 100)}%" if d.pop_max is not None else "N/A"
    tmax = _temp(d.temp_max)
    tmin = _temp(d.temp_min)
    return f"- {d.date.isoformat()}: {d.description or 'N/A'} — {tmax}°C / {tmin}°C, precip {pop}"


def format_weather_context(result: ForecastResult | None) -> str:
    """Compact per-day summary injected into the LLM conversation.

    Returns "" when there is nothing to say; callers then proceed without
    weather context.
    """
    if result is None or not result.daily:
        return ""
    lines = [CONTEXT_HEADER]
    lines.extend(format_day_line(d) for d in result.daily)
    return "\n".join(lines) + "\n"


def weather_system_message(result: ForecastResult | None) -> dict | None:
    summary = format_weather_context(result)
    if not summary:
        return None
    return {"role": "system", "content": f"WeatherContext:\n{summary}"}


def forecast_to_dict(result: ForecastResult) -> dict:
    return {
        "location": result.location,
        "lat": result.lat,
        "lon": result.lon,
        "source": result.source,
        "timezone_offset_seconds": result.timezone_offset_seconds,
        "daily": [
            {
                "date": d.date.isoformat(),
                "temp_avg": d.temp_avg,
                "temp_min": d.temp_min,
                "temp_max": d.temp_max,
                "description": d.description,
                "humidity_avg": d.humidity_avg,
                "wind_speed_avg": d.wind_speed_avg,
                "pop_max": d.pop_max,
            }
            for d in result.daily
        ],
    }


def format_forecast_json(result: ForecastResult) -> str:
    """JSON forecast for programmatic consumption."""
    return json.dumps(forecast_to_dict(result), indent=2, ensure_ascii=False)


def _temp(value: float | None) -> str:
    return "-" if value is None else f"{value:g}"
