"""Builders shared by the test suite."""

from datetime import UTC, datetime, timedelta

from skychat.models.forecast import RawSample


class FakeClock:
    """Manually advanced time source for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def ts(iso: str) -> int:
    """Epoch seconds for a naive ISO timestamp interpreted as UTC."""
    return int(datetime.fromisoformat(iso).replace(tzinfo=UTC).timestamp())


def make_sample(iso: str = "2026-10-18T12:00:00", **fields) -> RawSample:
    return RawSample(timestamp=ts(iso), **fields)


def owm_item(iso: str, temp=15.0, temp_min=14.0, temp_max=16.0, humidity=70,
             wind=3.0, pop=None, description="clear sky") -> dict:
    item = {
        "dt": ts(iso),
        "main": {
            "temp": temp,
            "temp_min": temp_min,
            "temp_max": temp_max,
            "humidity": humidity,
        },
        "wind": {"speed": wind},
        "weather": [{"description": description}] if description else [],
    }
    if pop is not None:
        item["pop"] = pop
    return item


def owm_payload(days: int = 5, start: str = "2026-10-18", timezone: int = 0) -> dict:
    """A /data/2.5/forecast body with 8 three-hourly entries per UTC day."""
    base = datetime.fromisoformat(start)
    items = []
    for d in range(days):
        for h in range(0, 24, 3):
            stamp = (base + timedelta(days=d, hours=h)).isoformat()
            items.append(owm_item(stamp, temp=10.0 + d, pop=0.05 * (h // 3)))
    return {
        "cod": "200",
        "cnt": len(items),
        "list": items,
        "city": {"name": "Tokyo", "country": "JP", "timezone": timezone},
    }
