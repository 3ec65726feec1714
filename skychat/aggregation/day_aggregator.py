"""Reduce one day's samples to a DailyAggregate.

Every numeric field is computed only over samples that carry it; a day with
no such samples yields None, never 0. Precipitation probability is the one
exception: a sample without it counts as 0, because upstream omits the field
when the chance is negligible.
"""

from collections import Counter
from collections.abc import Sequence
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from skychat.models.forecast import DailyAggregate, RawSample


def aggregate_day(day: date | str, samples: Sequence[RawSample]) -> DailyAggregate:
    if isinstance(day, str):
        day = date.fromisoformat(day)

    temps = _present(s.temperature for s in samples)
    mins = _present(s.temperature_min for s in samples)
    maxs = _present(s.temperature_max for s in samples)
    hums = _present(s.humidity for s in samples)
    winds = _present(s.wind_speed for s in samples)

    temp_avg = _mean(temps)
    humidity_avg = _mean(hums)
    wind_avg = _mean(winds)

    return DailyAggregate(
        date=day,
        temp_avg=_round(temp_avg, 1) if temp_avg is not None else None,
        temp_min=_round(min(mins), 1) if mins else None,
        temp_max=_round(max(maxs), 1) if maxs else None,
        description=representative_description(samples),
        humidity_avg=int(_round(humidity_avg, 0)) if humidity_avg is not None else None,
        wind_speed_avg=_round(wind_avg, 1) if wind_avg is not None else None,
        pop_max=max_precipitation_probability(samples),
    )


def max_precipitation_probability(samples: Sequence[RawSample]) -> float | None:
    if not samples:
        return None
    return max(
        s.precipitation_probability if s.precipitation_probability is not None else 0.0
        for s in samples
    )


def representative_description(samples: Sequence[RawSample]) -> str:
    """Most frequent primary condition; ties go to the one seen first."""
    counts = Counter(s.primary_condition for s in samples if s.primary_condition)
    if not counts:
        return ""
    # Counter preserves insertion order and most_common() is a stable sort,
    # so equal counts keep first-seen order.
    return counts.most_common(1)[0][0]


def _present(values) -> list[float]:
    return [v for v in values if v is not None]


def _mean(values: list[float]) -> float | None:
    if not values:
        return None
    return sum(values) / len(values)


def _round(value: float, places: int) -> float:
    """Round half away from zero, unlike the built-in banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))
