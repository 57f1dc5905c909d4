from __future__ import annotations

from enum import Enum
from typing import Iterator, Mapping, Optional, Union

from ranges.bands import Bounded, RangeBand, RangeTable, Unbounded
from ranges.errors import UnknownStrategy


DEFAULT_INCREMENT = 10
STANDARD_BAND_COUNT = 99


class RangeStrategy(str, Enum):
    STANDARD = "Standard"      # Size and Speed/Range increments
    SIMPLIFIED = "Simplified"  # five named range bands


StrategyId = Union[RangeStrategy, str]


def strategy_name(strategy: StrategyId) -> str:
    if isinstance(strategy, RangeStrategy):
        return strategy.value
    return str(strategy)


def standard_table(increment: float = DEFAULT_INCREMENT, count: int = STANDARD_BAND_COUNT) -> RangeTable:
    """Band i (1-indexed) covers up to i * increment with penalty i - 1.

    No open-ended band: anything past count * increment has no match.
    """
    if increment <= 0:
        raise ValueError("increment must be > 0")
    if count < 0:
        raise ValueError("count must be >= 0")
    return RangeTable(
        bands=tuple(
            RangeBand(
                modifier_label=f"for {i} increments",
                bound=Bounded(max=increment * i),
                penalty=i - 1,
                description=f"{i} increments",
            )
            for i in range(1, count + 1)
        )
    )


SIMPLIFIED_TABLE = RangeTable(
    bands=(
        RangeBand(
            modifier_label="Close range (5 yds)",
            bound=Bounded(max=5),
            penalty=0,
            description="Can touch or strike foe",
        ),
        RangeBand(
            modifier_label="Short range (20 yds)",
            bound=Bounded(max=20),
            penalty=-3,
            description="Can talk to foe; pistol or muscle-powered missile range",
        ),
        RangeBand(
            modifier_label="Medium range (100 yds)",
            bound=Bounded(max=100),
            penalty=-7,
            description="Can only shout to foe; shotgun or SMG range",
        ),
        RangeBand(
            modifier_label="Long range (500 yds)",
            bound=Bounded(max=500),
            penalty=-11,
            description="Opponent out of earshot; rifle range",
        ),
        RangeBand(
            modifier_label="Extreme range (500+ yds)",
            bound=Unbounded(),
            penalty=-15,
            description="Rival difficult to even see; sniper range",
        ),
    )
)


class StrategyRegistry:
    """Named range tables. Registration order is kept for listing."""

    def __init__(self, tables: Optional[Mapping[StrategyId, RangeTable]] = None):
        self._tables: dict[str, RangeTable] = {}
        for name, table in (tables or {}).items():
            self.register(name, table)

    def register(self, name: StrategyId, table: RangeTable) -> None:
        key = strategy_name(name)
        if not key:
            raise ValueError("strategy name must be non-empty")
        self._tables[key] = table

    def get(self, name: StrategyId) -> RangeTable:
        try:
            return self._tables[strategy_name(name)]
        except KeyError:
            raise UnknownStrategy(name) from None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and strategy_name(name) in self._tables

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def names(self) -> list[str]:
        return list(self._tables)


def default_registry(increment: float = DEFAULT_INCREMENT) -> StrategyRegistry:
    return StrategyRegistry(
        {
            RangeStrategy.STANDARD: standard_table(increment),
            RangeStrategy.SIMPLIFIED: SIMPLIFIED_TABLE,
        }
    )
