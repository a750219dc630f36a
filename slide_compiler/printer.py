"""Canonical re-printer: turns slide ASTs back into source text."""
import decimal
from typing import Iterable

from .colours import Colour
from .models import Centre, Column, ContentNode, Padding, Row, Slide, StyleBlock, Text

INDENT = "  "


def format_value(value) -> str:
    if isinstance(value, Colour):
        return f'"{value.to_hex()}"'
    if isinstance(value, str):
        return format_string(value)
    if isinstance(value, float):
        text = repr(value)
        # the lexer has no exponent notation
        if "e" in text:
            text = format(decimal.Decimal(text), "f")
            if "." not in text:
                text += ".0"
        return text
    return repr(value)


def format_string(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def _format_params(pairs) -> str:
    pairs = [(key, value) for key, value in pairs if value is not None]
    if not pairs:
        return ""
    return "{" + ", ".join(f"{key}: {format_value(value)}" for key, value in pairs) + "}"


def format_node(node: ContentNode) -> str:
    """Single-line canonical form of a content expression."""
    prefix = f"{node.name} :: " if node.name else ""

    if isinstance(node, Centre):
        body = f"centre({format_node(node.child)})"
    elif isinstance(node, Padding):
        body = f"padding({format_node(node.child)})" + _format_params([("amount", node.amount)])
    elif isinstance(node, Row):
        body = "row(" + ", ".join(format_node(child) for child in node.children) + ")"
    elif isinstance(node, Column):
        body = "column(" + ", ".join(format_node(child) for child in node.children) + ")"
    elif isinstance(node, Text):
        body = f"text({format_string(node.value)})" + _format_params([("size", node.size), ("fill", node.fill)])
    else:
        raise TypeError(f"not a content node: {node!r}")

    return prefix + body


def format_style_block(block: StyleBlock) -> str:
    return f"{block.target} " + (_format_params(block.properties) or "{}")


def format_slide(slide: Slide) -> str:
    lines = ["[", INDENT + format_node(slide.root)]
    lines.extend(INDENT + format_style_block(block) for block in slide.style_blocks)
    lines.append("]")
    return "\n".join(lines)


def format_document(slides: Iterable[Slide]) -> str:
    """Render *slides* as source text that parses back to equal ASTs."""
    return "\n\n".join(format_slide(slide) for slide in slides) + "\n"
