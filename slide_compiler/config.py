"""Compiler configuration: built-in style defaults and environment overrides."""
import logging
import os
import re
from dataclasses import dataclass, field, replace
from typing import Optional

from .colours import Colour
from .models import Viewport

logger = logging.getLogger(__name__)

_VIEWPORT_PATTERN = re.compile(r'^\s*(\d+)\s*[xX]\s*(\d+)\s*$')


@dataclass(frozen=True)
class CompilerConfig:
    """
    Settings shared by the resolver, layout engine and CLI.

    Attributes:
        viewport: default outer size used when a slide sets no width/height
        text_size: default ``size`` for text
        text_fill: default ``fill`` for text
        padding_amount: ``amount`` for padding when nothing in the cascade sets it
        font_path: TrueType font used by :class:`PillowMeasurement`
        max_workers: worker threads for per-slide layout (1 = sequential)
        debug: verbose logging of the pipeline
    """
    viewport: Viewport = Viewport(1920, 1080)
    text_size: int = 16
    text_fill: Colour = field(default_factory=lambda: Colour(0, 0, 0))
    padding_amount: int = 12
    font_path: Optional[str] = None
    max_workers: int = 1
    debug: bool = False

    def with_viewport(self, width: int, height: int) -> "CompilerConfig":
        return replace(self, viewport=Viewport(max(0, int(width)), max(0, int(height))))

    @classmethod
    def from_env(cls, environ=None) -> "CompilerConfig":
        """
        Build a config from ``SLIDEC_*`` environment variables.

        ``SLIDEC_DEBUG=1`` enables debug logging, ``SLIDEC_FONT`` names a font
        file, ``SLIDEC_VIEWPORT`` is ``WIDTHxHEIGHT`` and ``SLIDEC_WORKERS``
        the layout thread count.
        """
        environ = os.environ if environ is None else environ
        config = cls(
            debug=environ.get("SLIDEC_DEBUG") == "1",
            font_path=environ.get("SLIDEC_FONT") or None,
        )

        viewport = environ.get("SLIDEC_VIEWPORT")
        if viewport:
            match = _VIEWPORT_PATTERN.match(viewport)
            if not match:
                raise ValueError(f"SLIDEC_VIEWPORT must look like 1920x1080, got {viewport!r}")
            config = config.with_viewport(int(match.group(1)), int(match.group(2)))

        workers = environ.get("SLIDEC_WORKERS")
        if workers:
            try:
                config = replace(config, max_workers=max(1, int(workers)))
            except ValueError:
                raise ValueError(f"SLIDEC_WORKERS must be an integer, got {workers!r}") from None

        if config.debug:
            logger.info(f"Loaded config from environment: {config}")
        return config
