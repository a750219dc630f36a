"""
Style cascade: merges style blocks into a concrete style per content node.

Precedence, lowest first::

    built-in defaults -> slide{} -> <kind>{} -> inline {params} -> <name>{}

Every level is a key-wise right-biased merge, so keys a level does not
mention fall through to the level below.  No level inherits from the
parent node.
"""
import logging
from typing import Dict, List, Optional, Sequence

from .config import CompilerConfig
from .errors import UnresolvedStyleTarget
from .models import (
    ContentKind,
    ContentNode,
    Padding,
    ResolvedSlide,
    ResolvedStyle,
    Slide,
    StyledNode,
    Text,
    Viewport,
    child_nodes,
)

logger = logging.getLogger(__name__)

_KIND_TARGETS = frozenset(kind.value for kind in ContentKind)


def inline_parameters(node: ContentNode) -> Dict:
    """Properties set directly on a content call, e.g. ``text("x"){size: 24}``."""
    if isinstance(node, Padding):
        params = {"amount": node.amount}
    elif isinstance(node, Text):
        params = {"size": node.size, "fill": node.fill}
    else:
        return {}
    return {key: value for key, value in params.items() if value is not None}


class StyleResolver:
    """Resolves the style cascade for slides against a viewport."""

    def __init__(self, config: Optional[CompilerConfig] = None):
        self.config = config or CompilerConfig()

    def defaults(self, viewport: Optional[Viewport] = None) -> ResolvedStyle:
        """Built-in defaults: full-viewport size, no background, default text style."""
        width, height = viewport if viewport else self.config.viewport
        viewport = Viewport(max(0, int(width)), max(0, int(height)))
        return ResolvedStyle({
            "width": viewport.width,
            "height": viewport.height,
            "size": self.config.text_size,
            "fill": self.config.text_fill,
            "amount": self.config.padding_amount,
        })

    def resolve(self, slide: Slide, viewport: Optional[Viewport] = None) -> ResolvedSlide:
        """
        Resolve every node of *slide*.

        Args:
            slide: parsed slide
            viewport: outer size that ``width``/``height`` default to

        Returns:
            ResolvedSlide with a styled tree mirroring ``slide.root``

        Raises:
            UnresolvedStyleTarget: a named block matches no element
        """
        slide_props: Dict = {}
        kind_props: Dict[str, Dict] = {}
        named_props: Dict[str, Dict] = {}

        for block in slide.style_blocks:
            if block.is_slide_block:
                slide_props = block.as_dict()
            elif block.target in _KIND_TARGETS:
                kind_props[block.target] = block.as_dict()
            else:
                named_props[block.target] = block.as_dict()

        names = {node.name for node in slide.nodes() if node.name}
        for block in slide.style_blocks:
            if block.target in named_props and block.target not in names:
                raise UnresolvedStyleTarget(block.position, block.target)

        base = self.defaults(viewport).merged(slide_props)
        root = self._resolve_node(slide.root, base, kind_props, named_props)

        resolved = ResolvedSlide(
            slide=slide,
            root=root,
            width=int(base.number("width")),
            height=int(base.number("height")),
            background=base.colour("bg"),
        )
        if self.config.debug:
            logger.info(
                f"Resolved slide at {slide.position}: {resolved.width}x{resolved.height}, "
                f"bg={resolved.background}, {len(named_props)} named block(s)"
            )
        return resolved

    def resolve_all(self, slides: Sequence[Slide], viewport: Optional[Viewport] = None) -> List[ResolvedSlide]:
        return [self.resolve(slide, viewport) for slide in slides]

    def _resolve_node(self, node: ContentNode, base: ResolvedStyle, kind_props, named_props) -> StyledNode:
        style = (
            base.merged(kind_props.get(node.kind.value))
            .merged(inline_parameters(node))
            .merged(named_props.get(node.name) if node.name else None)
        )
        children = tuple(
            self._resolve_node(child, base, kind_props, named_props)
            for child in child_nodes(node)
        )
        return StyledNode(node, style, children)


def resolve(slide: Slide, viewport: Optional[Viewport] = None, config: Optional[CompilerConfig] = None) -> ResolvedSlide:
    """Convenience wrapper around :meth:`StyleResolver.resolve`."""
    return StyleResolver(config).resolve(slide, viewport)
