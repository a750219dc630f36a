"""
Authoring errors raised while compiling slide source text.

Every error carries the :class:`SourcePosition` it was detected at so the
caller can point the author at the offending character.  Layout never
raises for geometry problems; only lexing, parsing and style resolution
can fail.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SourcePosition:
    """Zero-based character offset plus one-based line / column."""
    offset: int = 0
    line: int = 1
    column: int = 1

    def __str__(self):
        return f"line {self.line}, column {self.column}"


class SlideSourceError(ValueError):
    """Base class for every error that signals an authoring mistake."""

    def __init__(self, message: str, position: Optional[SourcePosition] = None):
        self.message = message
        self.position = position or SourcePosition()
        super().__init__(f"{self.position}: {message}")


class LexError(SlideSourceError):
    """Unrecognized character or malformed literal in the source text."""

    def __init__(self, position: SourcePosition, reason: str):
        self.reason = reason
        super().__init__(reason, position)


class ParseError(SlideSourceError):
    """Token stream does not match the grammar."""

    def __init__(self, position: SourcePosition, expected: str, found: str, message: Optional[str] = None):
        self.expected = expected
        self.found = found
        super().__init__(message or f"expected {expected}, found {found}", position)


class UnknownContentKind(ParseError):
    """Content expression names a kind that does not exist (e.g. ``triangle``)."""

    def __init__(self, position: SourcePosition, kind: str):
        self.kind = kind
        super().__init__(
            position,
            expected="a content kind (centre, padding, row, column, text)",
            found=repr(kind),
            message=f"unknown content kind {kind!r}",
        )


class InvalidParameterValue(SlideSourceError):
    """A property value has the wrong type or is out of range."""

    def __init__(self, position: SourcePosition, key: str, value, reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"invalid value {value!r} for {key!r}: {reason}", position)


class InvalidColour(SlideSourceError):
    """Colour string is not ``#RRGGBB`` or ``#RRGGBBAA``."""

    def __init__(self, position: SourcePosition, value):
        self.value = value
        super().__init__(f"invalid colour {value!r}, expected #RRGGBB or #RRGGBBAA", position)


class UnresolvedStyleTarget(SlideSourceError):
    """Named style block whose target matches no element of its slide."""

    def __init__(self, position: SourcePosition, target: str):
        self.target = target
        super().__init__(f"style block targets {target!r} but no element has that name", position)
