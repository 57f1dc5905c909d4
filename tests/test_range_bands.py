import math

import pytest

from ranges.bands import Bounded, RangeBand, RangeTable, Unbounded, check_distance, format_number
from ranges.errors import InvalidDistance, MalformedRangeTable


def test_find_returns_first_covering_band(mixed_table):
    assert mixed_table.find(0).modifier_label == "point blank"
    assert mixed_table.find(2).modifier_label == "point blank"
    assert mixed_table.find(2.01).modifier_label == "near"
    assert mixed_table.find(15).modifier_label == "still near"
    assert mixed_table.find(10_000).modifier_label == "horizon"


def test_every_distance_in_a_band_interval_maps_to_that_band(mixed_table):
    prev = 0.0
    for band in mixed_table:
        if isinstance(band.bound, Unbounded):
            for d in (prev + 0.5, prev * 10 + 1):
                assert mixed_table.find(d) is band
            continue
        for d in (prev if prev == 0 else prev + 0.001, (prev + band.bound.max) / 2, band.bound.max):
            assert mixed_table.find(d) is band
        prev = band.bound.max


def test_bounded_table_misses_past_last_bound():
    t = RangeTable(bands=(RangeBand("a", Bounded(5), 0), RangeBand("b", Bounded(10), -1)))
    assert t.find(10) is not None
    assert t.find(10.5) is None


def test_empty_table_is_allowed_but_never_matches():
    t = RangeTable()
    assert len(t) == 0
    assert t.find(0) is None
    assert not t.is_open_ended


def test_maxima_must_strictly_increase():
    with pytest.raises(MalformedRangeTable):
        RangeTable(bands=(RangeBand("a", Bounded(10), 0), RangeBand("b", Bounded(10), -1)))
    with pytest.raises(MalformedRangeTable):
        RangeTable(bands=(RangeBand("a", Bounded(10), 0), RangeBand("b", Bounded(4), -1)))


def test_open_ended_band_must_be_last():
    with pytest.raises(MalformedRangeTable):
        RangeTable(bands=(RangeBand("a", Unbounded(), 0), RangeBand("b", Bounded(10), -1)))
    with pytest.raises(MalformedRangeTable):
        RangeTable(bands=(RangeBand("a", Unbounded(), 0), RangeBand("b", Unbounded(), -1)))


def test_negative_or_nonfinite_max_rejected():
    with pytest.raises(MalformedRangeTable):
        RangeTable(bands=(RangeBand("a", Bounded(-1), 0),))
    with pytest.raises(MalformedRangeTable):
        RangeTable(bands=(RangeBand("a", Bounded(math.inf), 0),))


def test_from_list_treats_string_max_as_open_ended():
    t = RangeTable.from_list(
        [
            {"moddesc": "Close", "max": 5, "penalty": 0, "description": "touch"},
            {"moddesc": "Long", "max": "500", "penalty": -11, "desc": "rifle"},
            {"moddesc": "Extreme", "max": "500+", "penalty": -15, "desc": "sniper"},
        ]
    )
    assert t[1].bound == Bounded(500)
    assert t[1].description == "rifle"
    assert t[2].bound == Unbounded()
    assert t.is_open_ended
    assert t.bound_text(2) == "500+"


def test_check_distance_rejects_bad_input():
    for bad in (-1, -0.01, math.nan, math.inf, -math.inf, "10", None, True):
        with pytest.raises(InvalidDistance):
            check_distance(bad)
    assert check_distance(0) == 0.0
    assert check_distance(12) == 12.0


def test_format_number_rounds_to_two_places():
    assert format_number(5.0) == "5"
    assert format_number(2.345678) == "2.35"
    assert format_number(10) == "10"


def test_format_number_keeps_cents_on_large_values():
    assert format_number(12345.67) == "12345.67"
    assert format_number(1234567.25) == "1234567.25"
    assert format_number(100000) == "100000"
    assert format_number(0) == "0"


def test_huge_integers_are_invalid_not_overflow():
    with pytest.raises(InvalidDistance):
        check_distance(10**400)
    with pytest.raises(MalformedRangeTable):
        RangeTable((RangeBand("huge", Bounded(10**400), 0),))
