from __future__ import annotations

import logging
from typing import Optional

from ranges.bands import format_number
from ranges.collaborators import DistanceMeasurementCallback
from ranges.errors import InvalidDistance, NoApplicableBand
from ranges.modifiers import ModifierBucket, signed

logger = logging.getLogger(__name__)


def distance_text(d: float, units: str) -> str:
    return f"{format_number(d)} {units}"


class DistanceMeasurementTool:
    """
    Measurement ruler that reports a range modifier per segment.

    The ruler calls segment_label() for each segment while measuring and
    end_measurement() once the measurement is finished. The modifier itself
    comes from the callback (normally a RangeStrategyEngine).
    """

    def __init__(
        self,
        callback: DistanceMeasurementCallback,
        bucket: Optional[ModifierBucket] = None,
        units: str = "yd",
    ):
        self.callback = callback
        self.bucket = bucket
        self.units = units

    def modifier_for(self, total_distance: float) -> Optional[int]:
        """Range modifier for a distance, or None when no band applies."""
        try:
            return self.callback.penalty_for_distance(total_distance)
        except (InvalidDistance, NoApplicableBand) as e:
            logger.debug("no range modifier for %r: %s", total_distance, e)
            return None

    def segment_label(
        self,
        segment_distance: float,
        total_distance: float,
        is_total: bool = False,
        units: Optional[str] = None,
    ) -> str:
        units = units or self.units
        label = distance_text(segment_distance, units)
        if is_total and segment_distance != total_distance:
            label += f" [{distance_text(total_distance, units)}]"

        mod = self.modifier_for(total_distance)
        if self.bucket is not None:
            self.bucket.set_temp_range_mod(mod)
        if mod is None:
            return label
        return f"{label} ({signed(mod)})"

    def measure(self, segments: list[float], units: Optional[str] = None) -> list[str]:
        """Label every segment of a multi-leg measurement, cumulative totals included."""
        labels: list[str] = []
        total = 0.0
        for i, seg in enumerate(segments):
            total += seg
            labels.append(
                self.segment_label(seg, total, is_total=(i == len(segments) - 1), units=units)
            )
        return labels

    def end_measurement(self, dragged: bool = False) -> bool:
        """
        Commit the pending range modifier to the bucket.

        dragged=True means the measurement was token movement, not a range
        check, and nothing is added.
        """
        if dragged or self.bucket is None:
            return False
        return self.bucket.add_temp_range_mod()
