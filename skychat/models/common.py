"""Common types and helpers shared across models."""

import time
from enum import StrEnum
from typing import Callable, TypeAlias

Clock: TypeAlias = Callable[[], float]


class Language(StrEnum):
    EN = "en"
    JA = "ja"


def normalize_language(value: str | None, default: Language = Language.EN) -> Language:
    """Map a client-supplied language code onto a supported Language."""
    if not value:
        return default
    try:
        return Language(value.strip().lower())
    except ValueError:
        return default


def monotonic_clock() -> float:
    return time.monotonic()
