"""Lexer turning slide source text into a token stream."""
import logging
import re
from typing import Iterator, List

from .errors import LexError, SourcePosition
from .models import Token, TokenKind

logger = logging.getLogger(__name__)

_TOKEN_PATTERN = re.compile(r'''
    (?P<comment>//[^\n]*)
  | (?P<whitespace>\s+)
  | (?P<string>"(?:[^"\\]|\\.)*")
  | (?P<number>-?\d+(?:\.\d+)?)
  | (?P<definition>::)
  | (?P<identifier>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<punct>[\[\]{}(),:])
''', re.VERBOSE | re.DOTALL)

_PUNCTUATION = {
    "[": TokenKind.SLIDE_OPEN,
    "]": TokenKind.SLIDE_CLOSE,
    "{": TokenKind.BLOCK_OPEN,
    "}": TokenKind.BLOCK_CLOSE,
    "(": TokenKind.PAREN_OPEN,
    ")": TokenKind.PAREN_CLOSE,
    ",": TokenKind.COMMA,
    ":": TokenKind.COLON,
}

_ESCAPES = {'"': '"', '\\': '\\', 'n': '\n', 't': '\t'}
_ESCAPE_PATTERN = re.compile(r'\\(.)', re.DOTALL)


class Lexer:
    """
    Tokenizer for slide source text.

    A ``Lexer`` is restartable: every call to :meth:`tokens` (or iteration
    over the lexer itself) scans the source again from the beginning.
    Comments are recognized but never emitted by :meth:`tokens`; use
    :meth:`raw_tokens` to see them.
    """

    def __init__(self, source: str):
        self.source = source

    def __iter__(self) -> Iterator[Token]:
        return self.tokens()

    def tokens(self) -> Iterator[Token]:
        """Yield tokens without comments, ending with a single ``EOF`` token."""
        for token in self.raw_tokens():
            if token.kind is not TokenKind.COMMENT:
                yield token

    def tokenize(self) -> List[Token]:
        return list(self.tokens())

    def raw_tokens(self) -> Iterator[Token]:
        """
        Yield every token including comments.

        Raises:
            LexError: on the first character that cannot start a token
        """
        source = self.source
        offset = 0
        line = 1
        line_start = 0

        while offset < len(source):
            position = SourcePosition(offset, line, offset - line_start + 1)
            match = _TOKEN_PATTERN.match(source, offset)
            if match is None:
                raise LexError(position, self._describe_failure(source, offset))

            group = match.lastgroup
            text = match.group()

            if group == "number":
                end = match.end()
                if end < len(source) and (source[end].isalpha() or source[end] == "_"):
                    raise LexError(position, f"numbers take no unit suffix (found {text}{source[end]!r})")
                yield Token(TokenKind.NUMBER, text, position, _number_value(text))
            elif group == "string":
                yield Token(TokenKind.STRING, text, position, _unescape(text[1:-1], position))
            elif group == "identifier":
                yield Token(TokenKind.IDENTIFIER, text, position, text)
            elif group == "definition":
                yield Token(TokenKind.DEFINITION, text, position)
            elif group == "punct":
                yield Token(_PUNCTUATION[text], text, position)
            elif group == "comment":
                yield Token(TokenKind.COMMENT, text, position)

            newlines = text.count("\n")
            if newlines:
                line += newlines
                line_start = offset + text.rindex("\n") + 1
            offset = match.end()

        yield Token(TokenKind.EOF, "", SourcePosition(offset, line, offset - line_start + 1))

    @staticmethod
    def _describe_failure(source: str, offset: int) -> str:
        char = source[offset]
        if char == '"':
            return "unterminated string literal"
        if char == "-":
            return "expected a digit after '-'"
        return f"unexpected character {char!r}"


def _number_value(text: str):
    return float(text) if "." in text else int(text)


def _unescape(body: str, position: SourcePosition) -> str:
    def _replace(match):
        char = match.group(1)
        if char not in _ESCAPES:
            raise LexError(position, f"unknown escape sequence '\\{char}' in string literal")
        return _ESCAPES[char]

    return _ESCAPE_PATTERN.sub(_replace, body)


def tokenize(source: str) -> List[Token]:
    """Convenience wrapper: lex *source* into a list of tokens."""
    tokens = Lexer(source).tokenize()
    logger.debug(f"Lexed {len(tokens)} tokens")
    return tokens
