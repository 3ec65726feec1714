"""Forecast API: FastAPI surface over the forecast orchestrator."""

import os
from pathlib import Path

from fastapi import Depends, FastAPI, Query

from skychat.config.loader import load_config
from skychat.pipeline.forecast_pipeline import ForecastOrchestrator, build_orchestrator
from skychat.reporting.weather_context import format_weather_context, forecast_to_dict


CONFIG_PATH = Path(os.environ.get("SKYCHAT_CONFIG", "config/skychat.yaml"))

app = FastAPI(title="Skychat Forecast API", version="0.1.0")

_orchestrator: ForecastOrchestrator | None = None


def get_orchestrator() -> ForecastOrchestrator:
    """Process-wide orchestrator, built on first use."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = build_orchestrator(load_config(CONFIG_PATH))
    return _orchestrator


@app.get("/api/forecast")
def get_forecast(
    lat: str = Query(...),
    lon: str = Query(...),
    lang: str | None = Query(None),
    orchestrator: ForecastOrchestrator = Depends(get_orchestrator),
):
    """Aggregated 5-day forecast; ``forecast`` is null when unavailable."""
    result = orchestrator.get_forecast(lat, lon, language=lang)
    if result is None:
        return {"forecast": None, "context": ""}
    return {"forecast": forecast_to_dict(result), "context": format_weather_context(result)}


@app.get("/api/health")
def get_health(orchestrator: ForecastOrchestrator = Depends(get_orchestrator)):
    orchestrator.cache.purge_expired()
    return {
        "credential_configured": bool(orchestrator.api_key),
        "cached_forecasts": len(orchestrator.cache),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8778)
