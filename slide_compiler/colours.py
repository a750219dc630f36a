"""Colour values used by ``bg`` and ``fill`` properties."""
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import InvalidColour, SourcePosition

_HEX_COLOUR = re.compile(r'^#([0-9a-fA-F]{6})([0-9a-fA-F]{2})?$')


@dataclass(frozen=True)
class Colour:
    """An RGBA colour; alpha defaults to fully opaque."""
    r: int
    g: int
    b: int
    a: int = 255

    @classmethod
    def parse(cls, value, position: Optional[SourcePosition] = None) -> "Colour":
        """
        Parse a ``#RRGGBB`` or ``#RRGGBBAA`` string.

        Raises:
            InvalidColour: if *value* is not a string in one of those forms
        """
        if not isinstance(value, str):
            raise InvalidColour(position or SourcePosition(), value)
        match = _HEX_COLOUR.match(value)
        if not match:
            raise InvalidColour(position or SourcePosition(), value)

        rgb, alpha = match.groups()
        r, g, b = (int(rgb[i:i + 2], 16) for i in (0, 2, 4))
        a = int(alpha, 16) if alpha else 255
        return cls(r, g, b, a)

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    @property
    def rgba(self) -> Tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)

    def to_hex(self) -> str:
        """Canonical upper-case form; the alpha pair is dropped when opaque."""
        text = f"#{self.r:02X}{self.g:02X}{self.b:02X}"
        if self.a != 255:
            text += f"{self.a:02X}"
        return text

    def __str__(self):
        return self.to_hex()
