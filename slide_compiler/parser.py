"""
Recursive-descent parser building per-slide ASTs from a token stream.

Grammar::

    document   := slide*
    slide      := '[' content styleBlock* ']'
    content    := (name '::')? kind '(' argList? ')' paramBlock?
    styleBlock := target '{' (key ':' value ','?)* '}'

Property values are validated here so that every later stage can trust
the tree: numbers for ``width``/``height``/``size``/``amount`` must be
non-negative and ``bg``/``fill`` must be ``#RRGGBB[AA]`` colours.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .colours import Colour
from .errors import (
    InvalidParameterValue,
    ParseError,
    SourcePosition,
    UnknownContentKind,
)
from .lexer import Lexer
from .models import (
    SLIDE_TARGET,
    Centre,
    Column,
    ContentKind,
    ContentNode,
    Padding,
    PropertyValue,
    Row,
    Slide,
    StyleBlock,
    Text,
    Token,
    TokenKind,
    iter_nodes,
)

logger = logging.getLogger(__name__)

CONTENT_KINDS: Dict[str, ContentKind] = {
    "centre": ContentKind.CENTRE,
    "padding": ContentKind.PADDING,
    "row": ContentKind.ROW,
    "column": ContentKind.COLUMN,
    "col": ContentKind.COLUMN,
    "text": ContentKind.TEXT,
}

# Deepest content nesting accepted; every later stage walks the tree recursively
MAX_NESTING_DEPTH = 200

NUMBER_PROPERTIES = frozenset({"width", "height", "size", "amount"})
COLOUR_PROPERTIES = frozenset({"bg", "fill"})

# Keys accepted by the parameter block attached to a content call
INLINE_PARAMETERS: Dict[ContentKind, frozenset] = {
    ContentKind.PADDING: frozenset({"amount"}),
    ContentKind.TEXT: frozenset({"size", "fill"}),
}


def validate_property(key: str, value, position: SourcePosition) -> PropertyValue:
    """
    Check *value* against the type expected for *key* and normalize it.

    Colour keys are converted to :class:`Colour`; unknown keys pass through.

    Raises:
        InvalidParameterValue: wrong type or negative number
        InvalidColour: malformed colour string
    """
    if key in NUMBER_PROPERTIES:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidParameterValue(position, key, value, "expected a number")
        if value < 0:
            raise InvalidParameterValue(position, key, value, "must not be negative")
        return value
    if key in COLOUR_PROPERTIES:
        if isinstance(value, Colour):
            return value
        return Colour.parse(value, position)
    logger.debug(f"Unrecognized property {key!r} at {position} kept verbatim")
    return value


class Parser:
    """Parser over a finite token sequence (comments already removed)."""

    def __init__(self, tokens: Iterable[Token]):
        self._tokens: List[Token] = [t for t in tokens if t.kind is not TokenKind.COMMENT]
        if not self._tokens or self._tokens[-1].kind is not TokenKind.EOF:
            end = self._tokens[-1].position if self._tokens else SourcePosition()
            self._tokens.append(Token(TokenKind.EOF, "", end))
        self._index = 0
        self._depth = 0

    # ------------------------------------------------------------------
    # token helpers
    # ------------------------------------------------------------------

    def _peek(self, ahead: int = 0) -> Token:
        index = min(self._index + ahead, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        token = self._peek()
        if token.kind is not TokenKind.EOF:
            self._index += 1
        return token

    def _expect(self, kind: TokenKind, expected: Optional[str] = None) -> Token:
        token = self._peek()
        if token.kind is not kind:
            raise ParseError(token.position, expected or repr(kind.value), token.describe())
        return self._advance()

    # ------------------------------------------------------------------
    # grammar
    # ------------------------------------------------------------------

    def parse(self) -> List[Slide]:
        slides = []
        while self._peek().kind is not TokenKind.EOF:
            slides.append(self._parse_slide())
        logger.debug(f"Parsed {len(slides)} slide(s)")
        return slides

    def _parse_slide(self) -> Slide:
        opening = self._expect(TokenKind.SLIDE_OPEN, "'[' to open a slide")
        root: Optional[ContentNode] = None
        blocks: List[StyleBlock] = []

        while self._peek().kind is not TokenKind.SLIDE_CLOSE:
            token = self._peek()
            if token.kind is not TokenKind.IDENTIFIER:
                raise ParseError(token.position, "a content expression, style block or ']'", token.describe())

            if self._peek(1).kind is TokenKind.BLOCK_OPEN:
                blocks.append(self._parse_style_block())
            elif root is not None:
                raise ParseError(
                    token.position,
                    "a style block",
                    token.describe(),
                    message=f"multiple content roots: {token.text!r} starts a second content expression",
                )
            else:
                root = self._parse_content()

        closing = self._advance()
        if root is None:
            raise ParseError(closing.position, "a content expression", "']'", message="slide has no content")

        self._check_unique_targets(blocks)
        self._check_unique_names(root)
        return Slide(root, tuple(blocks), opening.position)

    def _parse_content(self) -> ContentNode:
        token = self._expect(TokenKind.IDENTIFIER, "a content expression")
        if self._depth >= MAX_NESTING_DEPTH:
            raise ParseError(
                token.position, "a shallower content tree", token.describe(),
                message=f"content nested more than {MAX_NESTING_DEPTH} levels deep",
            )
        self._depth += 1
        try:
            return self._parse_content_body(token)
        finally:
            self._depth -= 1

    def _parse_content_body(self, token: Token) -> ContentNode:
        name = None

        if self._peek().kind is TokenKind.DEFINITION:
            if token.text in CONTENT_KINDS or token.text == SLIDE_TARGET:
                raise ParseError(
                    token.position, "an element name", token.describe(),
                    message=f"{token.text!r} is reserved and cannot be used as an element name",
                )
            self._advance()
            name = token.text
            token = self._expect(TokenKind.IDENTIFIER, "a content kind")

        kind = CONTENT_KINDS.get(token.text)
        if kind is None:
            raise UnknownContentKind(token.position, token.text)

        self._expect(TokenKind.PAREN_OPEN, "'(' after content kind")

        if kind in (ContentKind.CENTRE, ContentKind.PADDING):
            args = self._parse_content_args(kind, single=True)
        elif kind in (ContentKind.ROW, ContentKind.COLUMN):
            args = self._parse_content_args(kind, single=False)
        else:
            literal = self._expect(TokenKind.STRING, "a string literal")
            args = (literal.value,)

        self._expect(TokenKind.PAREN_CLOSE, f"')' to close {kind.value}(...)")

        params: Dict[str, PropertyValue] = {}
        if self._peek().kind is TokenKind.BLOCK_OPEN:
            params = self._parse_parameter_block(kind)

        return self._build_node(kind, args, params, name, token.position)

    def _parse_content_args(self, kind: ContentKind, single: bool) -> Tuple[ContentNode, ...]:
        if self._peek().kind is TokenKind.PAREN_CLOSE:
            arity = "exactly one content argument" if single else "at least one content argument"
            raise ParseError(
                self._peek().position, "a content argument", "')'",
                message=f"{kind.value}() requires {arity}",
            )

        children = [self._parse_content()]
        while not single and self._peek().kind is TokenKind.COMMA:
            self._advance()
            if self._peek().kind is TokenKind.PAREN_CLOSE:
                break
            children.append(self._parse_content())

        if single and self._peek().kind is TokenKind.COMMA:
            extra = self._peek()
            raise ParseError(
                extra.position, "')'", extra.describe(),
                message=f"{kind.value}() takes exactly one content argument",
            )
        return tuple(children)

    def _parse_parameter_block(self, kind: ContentKind) -> Dict[str, PropertyValue]:
        allowed = INLINE_PARAMETERS.get(kind, frozenset())
        params = {}
        for key, value, position in self._parse_properties():
            if key not in allowed:
                expected = ", ".join(sorted(allowed)) if allowed else "no parameters"
                raise ParseError(
                    position, expected, repr(key),
                    message=f"{kind.value} does not accept parameter {key!r}",
                )
            params[key] = validate_property(key, value, position)
        return params

    def _parse_style_block(self) -> StyleBlock:
        target = self._expect(TokenKind.IDENTIFIER, "a style target")
        name = target.text
        if CONTENT_KINDS.get(name) is ContentKind.COLUMN:
            name = ContentKind.COLUMN.value

        properties = tuple(
            (key, validate_property(key, value, position))
            for key, value, position in self._parse_properties()
        )
        return StyleBlock(name, properties, target.position)

    def _parse_properties(self) -> List[Tuple[str, object, SourcePosition]]:
        self._expect(TokenKind.BLOCK_OPEN, "'{'")
        properties = []
        seen = set()

        while self._peek().kind is not TokenKind.BLOCK_CLOSE:
            key = self._expect(TokenKind.IDENTIFIER, "a property name or '}'")
            if key.text in seen:
                raise ParseError(key.position, "a new property name", key.describe(),
                                 message=f"duplicate property {key.text!r}")
            seen.add(key.text)

            self._expect(TokenKind.COLON, "':' after property name")
            value = self._peek()
            if value.kind not in (TokenKind.NUMBER, TokenKind.STRING):
                raise ParseError(value.position, "a number or string value", value.describe())
            self._advance()
            properties.append((key.text, value.value, value.position))

            if self._peek().kind is TokenKind.COMMA:
                self._advance()

        self._advance()
        return properties

    # ------------------------------------------------------------------
    # construction + structural checks
    # ------------------------------------------------------------------

    @staticmethod
    def _build_node(kind, args, params, name, position) -> ContentNode:
        if kind is ContentKind.CENTRE:
            return Centre(args[0], name=name, position=position)
        if kind is ContentKind.PADDING:
            return Padding(args[0], amount=params.get("amount"), name=name, position=position)
        if kind is ContentKind.ROW:
            return Row(args, name=name, position=position)
        if kind is ContentKind.COLUMN:
            return Column(args, name=name, position=position)
        if kind is ContentKind.TEXT:
            return Text(args[0], size=params.get("size"), fill=params.get("fill"), name=name, position=position)
        raise AssertionError(f"unhandled content kind {kind!r}")

    @staticmethod
    def _check_unique_targets(blocks: List[StyleBlock]) -> None:
        seen = set()
        for block in blocks:
            if block.target in seen:
                raise ParseError(block.position, "a new style target", repr(block.target),
                                 message=f"duplicate style block for {block.target!r}")
            seen.add(block.target)

    @staticmethod
    def _check_unique_names(root: ContentNode) -> None:
        seen = set()
        for node in iter_nodes(root):
            if node.name is None:
                continue
            if node.name in seen:
                raise ParseError(node.position, "a unique element name", repr(node.name),
                                 message=f"element name {node.name!r} is defined more than once")
            seen.add(node.name)


def parse(source: str) -> List[Slide]:
    """
    Lex and parse *source* into an ordered list of slides.

    Raises:
        LexError, ParseError, InvalidParameterValue, InvalidColour
    """
    return Parser(Lexer(source).tokens()).parse()
