"""
Data models for the slide compiler.

The content tree is a closed set of five frozen dataclasses (``Centre``,
``Padding``, ``Row``, ``Column``, ``Text``).  Source positions are carried
for error reporting but excluded from equality, so re-parsing a canonical
re-print yields an equal tree.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, Iterator, NamedTuple, Optional, Tuple, Union

from .colours import Colour
from .errors import SourcePosition

Number = Union[int, float]
PropertyValue = Union[str, int, float, Colour]


# ----------------------------------------------------------------------
# Tokens
# ----------------------------------------------------------------------

class TokenKind(Enum):
    SLIDE_OPEN = "["
    SLIDE_CLOSE = "]"
    BLOCK_OPEN = "{"
    BLOCK_CLOSE = "}"
    PAREN_OPEN = "("
    PAREN_CLOSE = ")"
    COLON = ":"
    DEFINITION = "::"
    COMMA = ","
    IDENTIFIER = "identifier"
    STRING = "string"
    NUMBER = "number"
    COMMENT = "comment"
    EOF = "end of input"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    position: SourcePosition
    value: Optional[Union[str, Number]] = None  # decoded literal for STRING / NUMBER

    def describe(self) -> str:
        """Short human-readable form used in error messages."""
        if self.kind is TokenKind.EOF:
            return "end of input"
        if self.kind in (TokenKind.IDENTIFIER, TokenKind.NUMBER, TokenKind.STRING):
            return f"{self.kind.value} {self.text}"
        return repr(self.text)


# ----------------------------------------------------------------------
# Content tree
# ----------------------------------------------------------------------

class ContentKind(str, Enum):
    CENTRE = "centre"
    PADDING = "padding"
    ROW = "row"
    COLUMN = "column"
    TEXT = "text"


@dataclass(frozen=True)
class Centre:
    child: "ContentNode"
    name: Optional[str] = None
    position: SourcePosition = field(default_factory=SourcePosition, compare=False, repr=False)

    kind: ClassVar[ContentKind] = ContentKind.CENTRE


@dataclass(frozen=True)
class Padding:
    child: "ContentNode"
    amount: Optional[Number] = None  # None -> taken from the style cascade
    name: Optional[str] = None
    position: SourcePosition = field(default_factory=SourcePosition, compare=False, repr=False)

    kind: ClassVar[ContentKind] = ContentKind.PADDING


@dataclass(frozen=True)
class Row:
    children: Tuple["ContentNode", ...]
    name: Optional[str] = None
    position: SourcePosition = field(default_factory=SourcePosition, compare=False, repr=False)

    kind: ClassVar[ContentKind] = ContentKind.ROW


@dataclass(frozen=True)
class Column:
    children: Tuple["ContentNode", ...]
    name: Optional[str] = None
    position: SourcePosition = field(default_factory=SourcePosition, compare=False, repr=False)

    kind: ClassVar[ContentKind] = ContentKind.COLUMN


@dataclass(frozen=True)
class Text:
    value: str
    size: Optional[Number] = None
    fill: Optional[Colour] = None
    name: Optional[str] = None
    position: SourcePosition = field(default_factory=SourcePosition, compare=False, repr=False)

    kind: ClassVar[ContentKind] = ContentKind.TEXT


ContentNode = Union[Centre, Padding, Row, Column, Text]


def child_nodes(node: ContentNode) -> Tuple[ContentNode, ...]:
    """Direct children of *node*, in source order."""
    if isinstance(node, (Centre, Padding)):
        return (node.child,)
    if isinstance(node, (Row, Column)):
        return node.children
    return ()


def iter_nodes(node: ContentNode) -> Iterator[ContentNode]:
    """Pre-order walk over *node* and all of its descendants."""
    yield node
    for child in child_nodes(node):
        yield from iter_nodes(child)


# ----------------------------------------------------------------------
# Style blocks and slides
# ----------------------------------------------------------------------

SLIDE_TARGET = "slide"


@dataclass(frozen=True)
class StyleBlock:
    """``target { key: value, ... }``; properties keep their source order."""
    target: str
    properties: Tuple[Tuple[str, PropertyValue], ...] = ()
    position: SourcePosition = field(default_factory=SourcePosition, compare=False, repr=False)

    @property
    def is_slide_block(self) -> bool:
        return self.target == SLIDE_TARGET

    def as_dict(self) -> Dict[str, PropertyValue]:
        return dict(self.properties)


@dataclass(frozen=True)
class Slide:
    root: ContentNode
    style_blocks: Tuple[StyleBlock, ...] = ()
    position: SourcePosition = field(default_factory=SourcePosition, compare=False, repr=False)

    def nodes(self) -> Iterator[ContentNode]:
        return iter_nodes(self.root)


# ----------------------------------------------------------------------
# Resolved styles
# ----------------------------------------------------------------------

class ResolvedStyle(Mapping):
    """
    Read-only mapping of effective property values for one node.

    Merging never mutates: :meth:`merged` returns a new instance whose keys
    are the right-biased union of this mapping and the overrides.
    """

    __slots__ = ("_values",)

    def __init__(self, values=None):
        self._values = dict(values or {})

    def __getitem__(self, key):
        return self._values[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return f"ResolvedStyle({self._values!r})"

    def merged(self, overrides) -> "ResolvedStyle":
        if not overrides:
            return self
        values = dict(self._values)
        values.update(overrides)
        return ResolvedStyle(values)

    def number(self, key: str, default: Number = 0) -> Number:
        value = self._values.get(key, default)
        return value if isinstance(value, (int, float)) else default

    def colour(self, key: str) -> Optional[Colour]:
        value = self._values.get(key)
        return value if isinstance(value, Colour) else None


@dataclass(frozen=True)
class StyledNode:
    """A content node paired with its resolved style; mirrors the content tree."""
    node: ContentNode
    style: ResolvedStyle
    children: Tuple["StyledNode", ...] = ()

    @property
    def kind(self) -> ContentKind:
        return self.node.kind


class Viewport(NamedTuple):
    width: int
    height: int


@dataclass(frozen=True)
class ResolvedSlide:
    """A slide after the style cascade: concrete size, background and styled tree."""
    slide: Slide
    root: StyledNode
    width: int
    height: int
    background: Optional[Colour] = None

    @property
    def viewport(self) -> Viewport:
        return Viewport(self.width, self.height)


# ----------------------------------------------------------------------
# Layout output
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class TextPayload:
    value: str
    size: Number
    fill: Optional[Colour]


@dataclass(frozen=True)
class Box:
    """
    A positioned, sized element of the layout output.

    ``x``/``y`` are relative to the parent box (the root sits at 0, 0);
    :meth:`walk_absolute` yields slide coordinates.  ``text`` is only set
    for text leaves and carries everything a renderer needs to draw them.
    """
    kind: ContentKind
    x: int
    y: int
    width: int
    height: int
    children: Tuple["Box", ...] = ()
    name: Optional[str] = None
    text: Optional[TextPayload] = None
    node: Optional[ContentNode] = field(default=None, compare=False, repr=False)
    style: Optional[ResolvedStyle] = field(default=None, compare=False, repr=False)

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def walk(self) -> Iterator["Box"]:
        """Pre-order walk over this box and all descendants."""
        yield self
        for child in self.children:
            yield from child.walk()

    def walk_absolute(self, origin_x: int = 0, origin_y: int = 0) -> Iterator[Tuple["Box", int, int]]:
        """Pre-order walk yielding (box, absolute x, absolute y)."""
        x = origin_x + self.x
        y = origin_y + self.y
        yield self, x, y
        for child in self.children:
            yield from child.walk_absolute(x, y)

    def to_dict(self) -> Dict:
        data = {
            "kind": self.kind.value,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }
        if self.name:
            data["name"] = self.name
        if self.text is not None:
            data["text"] = {
                "value": self.text.value,
                "size": self.text.size,
                "fill": self.text.fill.to_hex() if self.text.fill else None,
            }
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass(frozen=True)
class SlideRecord:
    width: int
    height: int
    background: Optional[Colour] = None


@dataclass(frozen=True)
class LaidOutSlide:
    """What the renderer receives for one slide."""
    index: int
    record: SlideRecord
    box: Box

    def to_dict(self) -> Dict:
        return {
            "index": self.index,
            "width": self.record.width,
            "height": self.record.height,
            "background": self.record.background.to_hex() if self.record.background else None,
            "box": self.box.to_dict(),
        }
