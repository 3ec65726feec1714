"""Group raw forecast samples into calendar-day buckets."""

from collections import defaultdict
from collections.abc import Iterable
from datetime import UTC, datetime

from skychat.models.forecast import RawSample


def local_day_key(timestamp: int, offset_seconds: int | None = None) -> str:
    """ISO date (YYYY-MM-DD) of a timestamp shifted by a UTC offset."""
    shifted = timestamp + (offset_seconds or 0)
    return datetime.fromtimestamp(shifted, UTC).date().isoformat()


def bucket_by_day(
    samples: Iterable[RawSample], offset_seconds: int | None = None
) -> dict[str, list[RawSample]]:
    """Map each local day to the samples that fall on it, in input order."""
    buckets: dict[str, list[RawSample]] = defaultdict(list)
    for sample in samples:
        buckets[local_day_key(sample.timestamp, offset_seconds)].append(sample)
    return dict(buckets)


def earliest_days(
    buckets: dict[str, list[RawSample]], limit: int = 5
) -> list[tuple[str, list[RawSample]]]:
    """The ``limit`` chronologically earliest buckets, ascending.

    ISO dates sort lexicographically in chronological order.
    """
    return [(day, buckets[day]) for day in sorted(buckets)[:limit]]
