"""Test text measurement providers."""

import pytest
from slide_compiler.measurement import MonospaceMeasurement, PillowMeasurement


def test_monospace_measurement():
    measurer = MonospaceMeasurement(advance=0.5, line_height=1.0)
    assert measurer.measure("Hello", 24) == (60, 24)
    assert measurer.measure("abc", 3) == (5, 3)  # 4.5 rounds up


def test_monospace_multiline_uses_longest_line():
    measurer = MonospaceMeasurement(advance=1.0, line_height=1.5)
    assert measurer.measure("ab\nabcd\na", 10) == (40, 45)


@pytest.mark.parametrize("text,size", [("", 20), ("abc", 0), ("abc", -3)])
def test_monospace_empty_measurements(text, size):
    assert MonospaceMeasurement().measure(text, size) == (0, 0)


def test_pillow_default_font_measures_text():
    measurer = PillowMeasurement()
    short_w, short_h = measurer.measure("Hi", 24)
    long_w, long_h = measurer.measure("Hi there, a longer line", 24)

    assert short_w > 0 and short_h > 0
    assert long_w > short_w
    assert long_h == short_h


def test_pillow_larger_size_is_larger():
    measurer = PillowMeasurement()
    small = measurer.measure("Hello", 12)
    large = measurer.measure("Hello", 48)
    assert large[0] > small[0]
    assert large[1] > small[1]


def test_pillow_is_deterministic_and_cached():
    measurer = PillowMeasurement()
    first = measurer.measure("Cached", 20)
    assert measurer.measure("Cached", 20) == first
    assert ("Cached", 20) in measurer._cache


def test_pillow_multiline_stacks_lines():
    measurer = PillowMeasurement()
    one_w, one_h = measurer.measure("line", 20)
    two_w, two_h = measurer.measure("line\nline", 20)
    assert two_w == one_w
    assert two_h == 2 * one_h


def test_pillow_zero_size():
    assert PillowMeasurement().measure("abc", 0) == (0, 0)
