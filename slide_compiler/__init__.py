"""
Slide Compiler Package

Compiles slide source text into positioned box trees: lexing, parsing,
style cascade and constraints-down/sizes-up layout.
"""

from .compiler import SlideCompiler, compile_source
from .errors import (
    InvalidColour,
    InvalidParameterValue,
    LexError,
    ParseError,
    SlideSourceError,
    SourcePosition,
    UnknownContentKind,
    UnresolvedStyleTarget,
)
from .layout_engine import LayoutEngine
from .measurement import MonospaceMeasurement, PillowMeasurement
from .models import Box, LaidOutSlide, Slide
from .parser import parse
from .style_resolver import StyleResolver

__all__ = [
    'SlideCompiler', 'compile_source', 'parse', 'StyleResolver', 'LayoutEngine',
    'MonospaceMeasurement', 'PillowMeasurement', 'Box', 'LaidOutSlide', 'Slide',
    'SlideSourceError', 'SourcePosition', 'LexError', 'ParseError', 'UnknownContentKind',
    'InvalidParameterValue', 'InvalidColour', 'UnresolvedStyleTarget',
]
