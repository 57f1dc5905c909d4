import pytest

from ranges.bands import Bounded, RangeBand, RangeTable, Unbounded
from ranges.engine import RangeStrategyEngine
from ranges.modifiers import ModifierBucket
from ranges.strategies import default_registry


@pytest.fixture
def mixed_table():
    # Zero and non-zero penalties interleaved, open-ended at the end.
    return RangeTable(
        bands=(
            RangeBand("point blank", Bounded(2), 0, "adjacent"),
            RangeBand("near", Bounded(10), -1, ""),
            RangeBand("still near", Bounded(15), 0, ""),
            RangeBand("far", Bounded(50), -4, ""),
            RangeBand("horizon", Unbounded(), -9, ""),
        )
    )


@pytest.fixture
def bucket():
    return ModifierBucket()


@pytest.fixture
def engine():
    return RangeStrategyEngine(default_registry())
