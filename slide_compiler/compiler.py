#!/usr/bin/env python3
"""
Main compiler module tying together lexer, parser, style resolver and layout engine.
"""
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

from .config import CompilerConfig
from .errors import SlideSourceError
from .layout_engine import LayoutCache, LayoutEngine
from .measurement import MeasurementProvider, PillowMeasurement
from .models import LaidOutSlide, ResolvedSlide, Slide, Viewport
from .parser import parse
from .printer import format_document
from .style_resolver import StyleResolver

logger = logging.getLogger(__name__)


class SlideCompiler:
    """
    Compile slide source text into laid-out slides ready for a renderer.
    """

    def __init__(
        self,
        *,
        config: Optional[CompilerConfig] = None,
        measurer: Optional[MeasurementProvider] = None,
        cache: bool = False,
    ):
        """Create a new :class:`SlideCompiler`.

        Parameters
        ----------
        config
            Defaults for the style cascade, viewport, font and worker count.
            ``CompilerConfig()`` when omitted.
        measurer
            Text measurement provider.  A :class:`PillowMeasurement` using
            ``config.font_path`` is created when omitted.
        cache
            If ``True`` box trees are memoized per (slide, viewport), so
            re-laying out an unchanged deck at the same size is free.
        """
        self.config = config or CompilerConfig()
        self.debug = self.config.debug

        self.resolver = StyleResolver(self.config)
        self.layout_engine = LayoutEngine(
            measurer or PillowMeasurement(self.config.font_path, debug=self.debug),
            cache=LayoutCache() if cache else None,
            debug=self.debug,
        )

    def parse(self, source: str) -> List[Slide]:
        slides = parse(source)
        if self.debug:
            logger.info(f"Parsed {len(slides)} slide(s)")
        return slides

    def resolve(self, slides: Sequence[Slide], viewport: Optional[Sequence[int]] = None) -> List[ResolvedSlide]:
        viewport = Viewport(*viewport) if viewport else self.config.viewport
        return self.resolver.resolve_all(slides, viewport)

    def layout_all(self, resolved: Sequence[ResolvedSlide]) -> List[LaidOutSlide]:
        """
        Lay out every slide, concurrently when ``config.max_workers > 1``.

        Slides are independent, so the only coordination is collecting the
        results; the returned list always follows document order.
        """
        indices = range(len(resolved))
        if self.config.max_workers > 1 and len(resolved) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                return list(pool.map(self.layout_engine.layout_slide, resolved, indices))
        return [self.layout_engine.layout_slide(slide, index) for slide, index in zip(resolved, indices)]

    def compile(self, source: str, viewport: Optional[Sequence[int]] = None) -> List[LaidOutSlide]:
        """
        Run the whole pipeline on *source*.

        Args:
            source: slide source text
            viewport: outer (width, height); ``config.viewport`` when omitted

        Returns:
            One :class:`LaidOutSlide` per slide, in document order

        Raises:
            SlideSourceError: any lexing, parsing or style resolution failure;
                the whole document is rejected
        """
        slides = self.parse(source)
        resolved = self.resolve(slides, viewport)
        laid_out = self.layout_all(resolved)

        if self.debug:
            logger.info(f"Compiled {len(laid_out)} slide(s)")
        return laid_out


def compile_source(source: str, viewport: Optional[Sequence[int]] = None, **kwargs) -> List[LaidOutSlide]:
    """Compile *source* with a throw-away :class:`SlideCompiler`."""
    return SlideCompiler(**kwargs).compile(source, viewport)


def describe_document(slides: Sequence[Slide]) -> str:
    """Human-readable summary used by ``slidec inspect``."""
    lines = [f"{len(slides)} slide(s), {sum(len(list(slide.nodes())) for slide in slides)} element(s)"]
    for index, slide in enumerate(slides, 1):
        nodes = list(slide.nodes())
        named = [node.name for node in nodes if node.name]
        targets = [block.target for block in slide.style_blocks]
        lines.append(
            f"  slide {index} ({slide.position}): root {slide.root.kind.value}, "
            f"{len(nodes)} element(s)"
        )
        if named:
            lines.append(f"    names: {', '.join(named)}")
        if targets:
            lines.append(f"    style blocks: {', '.join(targets)}")
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point for the slide compiler."""
    import argparse

    def _build_parser() -> argparse.ArgumentParser:
        p = argparse.ArgumentParser(prog="slidec", description="Compile slide source into positioned box trees.")
        p.add_argument("--debug", action="store_true", help="Enable verbose logging")
        sub = p.add_subparsers(dest="command", required=True)

        inspect = sub.add_parser("inspect", help="Parse a file and print a summary (also a syntax check)")
        inspect.add_argument("source", type=Path, help="Slide source file")

        fmt = sub.add_parser("format", help="Print the canonical form of a file")
        fmt.add_argument("source", type=Path, help="Slide source file")

        lay = sub.add_parser("layout", help="Print the laid-out box trees as JSON")
        lay.add_argument("source", type=Path, help="Slide source file")
        lay.add_argument("--width", type=int, help="Viewport width (default from config)")
        lay.add_argument("--height", type=int, help="Viewport height (default from config)")
        lay.add_argument("--font", help="TrueType font used to measure text")
        lay.add_argument("--workers", type=int, help="Lay out slides on this many threads")
        return p

    args = _build_parser().parse_args(argv)

    config = CompilerConfig.from_env()
    if args.debug:
        config = replace(config, debug=True)

    logging.basicConfig(level=logging.DEBUG if config.debug else logging.INFO, format="%(levelname)s  %(message)s")

    source_path: Path = args.source
    if not source_path.exists():
        logger.error(f"Source file '{source_path}' not found")
        return 1
    source = source_path.read_text(encoding="utf-8")

    try:
        if args.command == "inspect":
            print(describe_document(parse(source)))
        elif args.command == "format":
            sys.stdout.write(format_document(parse(source)))
        else:
            if args.font:
                config = replace(config, font_path=args.font)
            if args.workers:
                config = replace(config, max_workers=max(1, args.workers))
            viewport = (
                args.width if args.width is not None else config.viewport.width,
                args.height if args.height is not None else config.viewport.height,
            )
            laid_out = SlideCompiler(config=config).compile(source, viewport)
            print(json.dumps([slide.to_dict() for slide in laid_out], indent=2))
    except SlideSourceError as exc:
        logger.error(f"{source_path}: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
