from __future__ import annotations

from typing import Any, Optional


class RangeStrategyError(Exception):
    """Base class for every error raised by the range strategy core."""


class InvalidDistance(RangeStrategyError, ValueError):
    """Distance was negative, NaN, infinite or not a number at all."""

    def __init__(self, distance: Any):
        self.distance = distance
        super().__init__(f"distance must be a finite number >= 0, got {distance!r}")


class NoApplicableBand(RangeStrategyError, LookupError):
    """
    Table exhausted without a match.

    Either the table is empty or it has no open-ended band and the distance
    lies beyond the last bound.
    """

    def __init__(self, distance: float, strategy: Optional[str] = None):
        self.distance = distance
        self.strategy = strategy
        where = f" in strategy {strategy!r}" if strategy else ""
        super().__init__(f"no range band covers distance {distance}{where}")


class UnknownStrategy(RangeStrategyError, KeyError):
    def __init__(self, strategy: Any):
        self.strategy = strategy
        super().__init__(strategy)

    def __str__(self) -> str:
        return f"unknown range strategy {self.strategy!r}"


class MalformedRangeTable(RangeStrategyError, ValueError):
    """Band ordering or sentinel placement broke the table invariants."""
