#!/usr/bin/env python3
"""
Layout engine: turns a styled content tree into a positioned box tree.

The walk is constraints-down / sizes-up: every node receives the maximum
width and height it may occupy, lays out its children, and reports the
size it actually chose.  Box origins are relative to the parent box.

Layout is total.  Negative or overflowing derived sizes are clamped to
zero or to the constraint instead of raising, so any structurally valid
slide always produces a box tree.
"""
import logging
import math
import threading
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from .measurement import MeasurementProvider, PillowMeasurement
from .models import (
    Box,
    Centre,
    Column,
    LaidOutSlide,
    Padding,
    ResolvedSlide,
    Row,
    SlideRecord,
    StyledNode,
    Text,
    TextPayload,
    Viewport,
)

logger = logging.getLogger(__name__)


def _clamp(value) -> int:
    """Floor *value* to an int and clamp it at zero."""
    return max(0, math.floor(value))


def split_evenly(total: int, count: int) -> List[int]:
    """
    Split *total* into *count* integer shares.

    Each share is ``total // count``; the remainder is handed out one unit
    at a time to the earliest shares, so the split is deterministic.
    """
    if count <= 0:
        return []
    base, remainder = divmod(max(0, total), count)
    return [base + (1 if index < remainder else 0) for index in range(count)]


class LayoutCache:
    """
    Box trees keyed by (styled tree identity, viewport).

    The styled tree is held alongside the box so its ``id`` cannot be
    reused while the entry is alive.
    """

    def __init__(self):
        self._entries: Dict[Tuple[int, Viewport], Tuple[StyledNode, Box]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, root: StyledNode, viewport: Viewport) -> Optional[Box]:
        with self._lock:
            entry = self._entries.get((id(root), viewport))
            if entry is None or entry[0] is not root:
                self.misses += 1
                return None
            self.hits += 1
            return entry[1]

    def put(self, root: StyledNode, viewport: Viewport, box: Box) -> None:
        with self._lock:
            self._entries[(id(root), viewport)] = (root, box)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self):
        return len(self._entries)


class LayoutEngine:
    """Lays out styled slides against a viewport."""

    def __init__(
        self,
        measurer: Optional[MeasurementProvider] = None,
        *,
        cache: Optional[LayoutCache] = None,
        debug: bool = False,
    ):
        """
        Args:
            measurer: text measurement provider; defaults to Pillow's default font
            cache: optional box-tree cache shared across re-layouts
            debug: log every laid-out slide
        """
        self.measurer = measurer or PillowMeasurement(debug=debug)
        self.cache = cache
        self.debug = debug

    def layout(self, root: StyledNode, viewport: Sequence[int]) -> Box:
        """
        Lay out *root* inside *viewport* (outer width, outer height).

        The returned root box sits at (0, 0) and never exceeds the viewport.
        """
        viewport = Viewport(_clamp(viewport[0]), _clamp(viewport[1]))

        if self.cache is not None:
            cached = self.cache.get(root, viewport)
            if cached is not None:
                return cached

        box = self._layout_node(root, viewport.width, viewport.height)

        if self.cache is not None:
            self.cache.put(root, viewport, box)
        return box

    def layout_slide(self, resolved: ResolvedSlide, index: int = 0) -> LaidOutSlide:
        """Lay out a resolved slide at its own width/height."""
        box = self.layout(resolved.root, resolved.viewport)
        record = SlideRecord(resolved.width, resolved.height, resolved.background)
        if self.debug:
            logger.info(
                f"Laid out slide {index + 1}: {record.width}x{record.height}, "
                f"{sum(1 for _ in box.walk())} box(es)"
            )
        return LaidOutSlide(index, record, box)

    # ------------------------------------------------------------------
    # per-kind layout
    # ------------------------------------------------------------------

    def _layout_node(self, styled: StyledNode, max_width: int, max_height: int) -> Box:
        node = styled.node

        if isinstance(node, Centre):
            return self._layout_centre(styled, max_width, max_height)
        if isinstance(node, Padding):
            return self._layout_padding(styled, max_width, max_height)
        if isinstance(node, Row):
            return self._layout_sequence(styled, max_width, max_height, horizontal=True)
        if isinstance(node, Column):
            return self._layout_sequence(styled, max_width, max_height, horizontal=False)
        if isinstance(node, Text):
            return self._layout_text(styled, max_width, max_height)
        raise TypeError(f"cannot lay out {type(node).__name__}")

    def _make_box(self, styled: StyledNode, width: int, height: int, children=(), text=None) -> Box:
        return Box(
            kind=styled.kind,
            x=0,
            y=0,
            width=_clamp(width),
            height=_clamp(height),
            children=tuple(children),
            name=styled.node.name,
            text=text,
            node=styled.node,
            style=styled.style,
        )

    def _layout_centre(self, styled: StyledNode, max_width: int, max_height: int) -> Box:
        child = self._layout_node(styled.children[0], max_width, max_height)
        offset_x = (max_width - child.width) // 2
        offset_y = (max_height - child.height) // 2
        child = replace(child, x=max(0, offset_x), y=max(0, offset_y))
        return self._make_box(styled, max_width, max_height, [child])

    def _layout_padding(self, styled: StyledNode, max_width: int, max_height: int) -> Box:
        amount = _clamp(styled.style.number("amount"))
        inner_width = _clamp(max_width - 2 * amount)
        inner_height = _clamp(max_height - 2 * amount)

        child = self._layout_node(styled.children[0], inner_width, inner_height)
        child = replace(child, x=amount, y=amount)

        width = min(max_width, child.width + 2 * amount)
        height = min(max_height, child.height + 2 * amount)
        return self._make_box(styled, width, height, [child])

    def _layout_sequence(self, styled: StyledNode, max_width: int, max_height: int, horizontal: bool) -> Box:
        main_total = max_width if horizontal else max_height
        shares = split_evenly(main_total, len(styled.children))

        placed = []
        cursor = 0
        cross = 0
        for child_styled, share in zip(styled.children, shares):
            if horizontal:
                child = self._layout_node(child_styled, share, max_height)
                child = replace(child, x=cursor, y=0)
                cursor += child.width
                cross = max(cross, child.height)
            else:
                child = self._layout_node(child_styled, max_width, share)
                child = replace(child, x=0, y=cursor)
                cursor += child.height
                cross = max(cross, child.width)
            placed.append(child)

        if horizontal:
            return self._make_box(styled, min(cursor, max_width), min(cross, max_height), placed)
        return self._make_box(styled, min(cross, max_width), min(cursor, max_height), placed)

    def _layout_text(self, styled: StyledNode, max_width: int, max_height: int) -> Box:
        node = styled.node
        size = styled.style.number("size")
        fill = styled.style.colour("fill")

        measured_width, measured_height = self.measurer.measure(node.value, size)
        width = min(_clamp(measured_width), max_width)
        height = min(_clamp(measured_height), max_height)
        if self.debug and (measured_width > max_width or measured_height > max_height):
            logger.debug(
                f"Text {node.value[:20]!r} overflows {max_width}x{max_height} "
                f"({measured_width}x{measured_height}); clamped"
            )

        return self._make_box(styled, width, height, text=TextPayload(node.value, size, fill))


def layout(root: StyledNode, viewport: Sequence[int], measurer: Optional[MeasurementProvider] = None) -> Box:
    """Convenience wrapper around :meth:`LayoutEngine.layout`."""
    return LayoutEngine(measurer).layout(root, viewport)
