"""Test colour parsing."""

import pytest
from slide_compiler.colours import Colour
from slide_compiler.errors import InvalidColour, SourcePosition


def test_parse_rgb():
    colour = Colour.parse("#1a2B3c")
    assert colour.rgba == (0x1A, 0x2B, 0x3C, 255)
    assert colour.to_hex() == "#1A2B3C"


def test_parse_rgba():
    colour = Colour.parse("#00000080")
    assert colour.a == 0x80
    assert str(colour) == "#00000080"


def test_opaque_alpha_prints_short_form():
    assert Colour.parse("#FFFFFFFF").to_hex() == "#FFFFFF"


@pytest.mark.parametrize("value", ["#FFF", "FFFFFF", "#FFFFF", "#FFFFFFF", "#ZZZZZZ", "", None, 255])
def test_invalid(value):
    with pytest.raises(InvalidColour):
        Colour.parse(value)


def test_error_keeps_position():
    position = SourcePosition(offset=4, line=2, column=3)
    with pytest.raises(InvalidColour) as exc_info:
        Colour.parse("blue", position)
    assert exc_info.value.position == position
    assert str(exc_info.value).startswith("line 2, column 3")
