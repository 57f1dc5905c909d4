from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from ranges.errors import InvalidDistance, MalformedRangeTable


@dataclass(frozen=True, slots=True)
class Bounded:
    """Inclusive upper bound, in distance units (yards)."""
    max: float

    def covers(self, distance: float) -> bool:
        return distance <= self.max


@dataclass(frozen=True, slots=True)
class Unbounded:
    """Open-ended bound: covers every distance past all earlier bands."""

    def covers(self, distance: float) -> bool:
        return True


Bound = Union[Bounded, Unbounded]


def format_number(x: float) -> str:
    """5.0 -> '5', 2.345 -> '2.35', 12345.678 -> '12345.68'."""
    return f"{float(x):.2f}".rstrip("0").rstrip(".")


def check_distance(distance: Any) -> float:
    # bool is an int subclass; "True yards" is never meaningful.
    if isinstance(distance, bool) or not isinstance(distance, Real):
        raise InvalidDistance(distance)
    try:
        d = float(distance)
    except OverflowError:
        raise InvalidDistance(distance) from None
    if math.isnan(d) or math.isinf(d) or d < 0:
        raise InvalidDistance(distance)
    return d


@dataclass(frozen=True, slots=True)
class RangeBand:
    modifier_label: str
    bound: Bound
    penalty: int
    description: str = ""

    @property
    def is_open_ended(self) -> bool:
        return isinstance(self.bound, Unbounded)

    def covers(self, distance: float) -> bool:
        return self.bound.covers(distance)


@dataclass(frozen=True, slots=True)
class RangeTable:
    """
    Ordered range bands, closest to farthest.

    Invariants (checked on construction):
      - bounded maxima are finite, >= 0 and strictly increasing
      - at most one Unbounded band, and only in last position

    An empty table is allowed; every lookup against it misses.
    """
    bands: tuple[RangeBand, ...] = ()

    def __post_init__(self) -> None:
        bands = tuple(self.bands)
        object.__setattr__(self, "bands", bands)

        prev: Optional[float] = None
        for i, band in enumerate(bands):
            if isinstance(band.bound, Unbounded):
                if i != len(bands) - 1:
                    raise MalformedRangeTable(
                        f"open-ended band {band.modifier_label!r} must be last (found at {i})"
                    )
                continue
            m = band.bound.max
            if isinstance(m, bool) or not isinstance(m, Real) or not _finite(m) or m < 0:
                raise MalformedRangeTable(f"band {i} has invalid max {m!r}")
            if prev is not None and m <= prev:
                raise MalformedRangeTable(
                    f"band {i} max {m} does not increase on previous max {prev}"
                )
            prev = m

    def __iter__(self) -> Iterator[RangeBand]:
        return iter(self.bands)

    def __len__(self) -> int:
        return len(self.bands)

    def __getitem__(self, i: int) -> RangeBand:
        return self.bands[i]

    @property
    def is_open_ended(self) -> bool:
        return bool(self.bands) and self.bands[-1].is_open_ended

    def find(self, distance: float) -> Optional[RangeBand]:
        """First band covering distance, or None. Distance is assumed validated."""
        for band in self.bands:
            if band.covers(distance):
                return band
        return None

    def bound_text(self, index: int) -> str:
        """Display text for a band's max, e.g. '20' or '500+' for the sentinel."""
        band = self.bands[index]
        if isinstance(band.bound, Bounded):
            return format_number(band.bound.max)
        if index == 0:
            return "0+"
        return f"{self.bound_text(index - 1)}+"

    @staticmethod
    def from_list(rows: Iterable[Mapping[str, Any]]) -> RangeTable:
        """Create a RangeTable from legacy band rows.

        Public import helper for tables kept in the old row format; nothing in
        this package loads them on its own.

        Each row looks like {"moddesc", "max", "penalty", "desc" | "description"}.
        A non-numeric string max (e.g. "500+") marks the open-ended final band.
        """
        bands: list[RangeBand] = []
        for row in rows:
            raw = row["max"]
            bound: Bound
            if raw is None:
                bound = Unbounded()
            elif isinstance(raw, str):
                s = raw.strip()
                try:
                    bound = Bounded(max=_parse_number(s))
                except ValueError:
                    bound = Unbounded()
            else:
                bound = Bounded(max=raw)
            bands.append(
                RangeBand(
                    modifier_label=str(row.get("moddesc", "")),
                    bound=bound,
                    penalty=int(row.get("penalty", 0)),
                    description=str(row.get("desc", row.get("description", ""))),
                )
            )
        return RangeTable(bands=tuple(bands))


def _finite(x: Real) -> bool:
    try:
        return math.isfinite(x)
    except OverflowError:
        return False


def _parse_number(s: str) -> float:
    v = float(s)
    return int(v) if v.is_integer() else v
