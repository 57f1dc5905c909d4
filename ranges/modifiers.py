from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ranges.bands import RangeTable

logger = logging.getLogger(__name__)

RANGE_MOD_LABEL = "for range"


def signed(mod: int) -> str:
    return f"{int(mod):+d}"


def format_modifier(penalty: int, label: str) -> str:
    return f"{signed(penalty)} {label}"


def build_modifier_list(table: RangeTable) -> tuple[str, ...]:
    """Display strings for every band that actually changes a roll, in table order."""
    return tuple(
        format_modifier(band.penalty, band.modifier_label)
        for band in table
        if band.penalty != 0
    )


@dataclass
class ModifierBucket:
    """
    In-memory modifier display.

    available: modifier strings offered to the user (refreshed on strategy change)
    active:    modifiers currently applied to the next roll
    temp_range_mod: range modifier from the measurement in progress, if any
    """
    available: tuple[str, ...] = ()
    active: list[str] = field(default_factory=list)
    temp_range_mod: Optional[int] = None
    refresh_count: int = 0

    def refresh(self, derived_modifiers: Sequence[str]) -> None:
        self.available = tuple(derived_modifiers)
        self.refresh_count += 1
        logger.debug("modifier bucket refreshed with %d entries", len(self.available))

    def set_temp_range_mod(self, mod: Optional[int]) -> None:
        self.temp_range_mod = mod

    def add_temp_range_mod(self) -> bool:
        """Apply the pending range modifier, replacing any earlier range entry."""
        if self.temp_range_mod is None:
            return False
        self.active = [m for m in self.active if not m.endswith(f" {RANGE_MOD_LABEL}")]
        # A zero range modifier still clears the old one but adds nothing.
        if self.temp_range_mod != 0:
            self.active.append(format_modifier(self.temp_range_mod, RANGE_MOD_LABEL))
        return True

    def clear(self) -> None:
        self.active = []
        self.temp_range_mod = None

    def total(self) -> int:
        return sum(int(m.split(" ", 1)[0]) for m in self.active)

    def to_dict(self) -> dict:
        return {
            "available": list(self.available),
            "active": list(self.active),
            "temp_range_mod": self.temp_range_mod,
            "total": self.total(),
        }
