"""Staleness checks for cached forecasts."""


def is_expired(born_at: float, ttl_seconds: float, now: float) -> bool:
    """An entry is fresh while ``now - born_at < ttl_seconds``."""
    return now - born_at >= ttl_seconds
