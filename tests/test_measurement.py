from ranges.engine import RangeStrategyEngine
from ranges.measurement import DistanceMeasurementTool
from ranges.strategies import default_registry


def _ruler(bucket, strategy="Simplified"):
    return DistanceMeasurementTool(RangeStrategyEngine(default_registry(), strategy), bucket)


def test_segment_label_includes_modifier(bucket):
    ruler = _ruler(bucket)
    assert ruler.segment_label(12, 12, is_total=True) == "12 yd (-3)"
    assert bucket.temp_range_mod == -3


def test_total_shown_when_segment_differs(bucket):
    ruler = _ruler(bucket)
    label = ruler.segment_label(3.333, 25.5, is_total=True, units="m")
    assert label == "3.33 m [25.5 m] (-7)"


def test_measure_accumulates_totals(bucket):
    ruler = _ruler(bucket)
    labels = ruler.measure([4, 4, 400])
    assert labels == ["4 yd (+0)", "4 yd (-3)", "400 yd [408 yd] (-11)"]
    assert bucket.temp_range_mod == -11


def test_end_measurement_adds_range_modifier(bucket):
    ruler = _ruler(bucket)
    ruler.measure([600])
    assert ruler.end_measurement() is True
    assert bucket.active == ["-15 for range"]


def test_movement_measurement_adds_nothing(bucket):
    ruler = _ruler(bucket)
    ruler.measure([50])
    assert ruler.end_measurement(dragged=True) is False
    assert bucket.active == []


def test_no_band_gives_plain_label(bucket):
    ruler = _ruler(bucket, "Standard")
    assert ruler.segment_label(1500, 1500) == "1500 yd"
    assert bucket.temp_range_mod is None
    assert ruler.end_measurement() is False


def test_tool_accepts_any_callback():
    class Flat:
        def penalty_for_distance(self, distance):
            return -2

    ruler = DistanceMeasurementTool(Flat())
    assert ruler.segment_label(7, 7) == "7 yd (-2)"
    assert ruler.end_measurement() is False


def test_large_distances_keep_two_decimals(bucket):
    ruler = _ruler(bucket)
    assert ruler.segment_label(12345.67, 12345.67) == "12345.67 yd (-15)"
