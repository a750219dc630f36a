#!/usr/bin/env python3
"""
Rows and columns must place their children side by side: no two siblings
overlap along the main axis and every child starts where the previous one ended.
"""

import pytest
from slide_compiler.layout_engine import LayoutEngine
from slide_compiler.models import ContentKind, Viewport
from slide_compiler.style_resolver import StyleResolver

from .helpers import random_slides

VIEWPORTS = [(1920, 1080), (640, 480), (101, 37), (3, 2)]


def rectangles_overlap(rect1, rect2):
    """Check if two (left, top, right, bottom) rectangles overlap."""
    left1, top1, right1, bottom1 = rect1
    left2, top2, right2, bottom2 = rect2
    if right1 <= left2 or right2 <= left1:
        return False
    if bottom1 <= top2 or bottom2 <= top1:
        return False
    return True


def laid_out_boxes(measurer, seed):
    engine = LayoutEngine(measurer)
    resolver = StyleResolver()
    for slide in random_slides(seed, 25):
        for viewport in VIEWPORTS:
            resolved = resolver.resolve(slide, Viewport(*viewport))
            yield engine.layout(resolved.root, viewport)


@pytest.mark.parametrize("seed", range(4))
def test_sequence_children_do_not_overlap(measurer, seed):
    for root in laid_out_boxes(measurer, seed):
        for box in root.walk():
            if box.kind not in (ContentKind.ROW, ContentKind.COLUMN):
                continue
            rects = [(c.x, c.y, c.right, c.bottom) for c in box.children]
            for i, first in enumerate(rects):
                for second in rects[i + 1:]:
                    assert not rectangles_overlap(first, second), f"overlap in {box.kind.value}: {first} {second}"


@pytest.mark.parametrize("seed", range(4))
def test_sequence_children_are_packed(measurer, seed):
    for root in laid_out_boxes(measurer, seed):
        for box in root.walk():
            if box.kind is ContentKind.ROW:
                cursor = 0
                for child in box.children:
                    assert (child.x, child.y) == (cursor, 0)
                    cursor += child.width
                assert box.width == cursor
                assert box.height == max(child.height for child in box.children)
            elif box.kind is ContentKind.COLUMN:
                cursor = 0
                for child in box.children:
                    assert (child.x, child.y) == (0, cursor)
                    cursor += child.height
                assert box.height == cursor
                assert box.width == max(child.width for child in box.children)
