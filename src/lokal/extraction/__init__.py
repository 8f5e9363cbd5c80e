"""Extraction of translatable text from UI source files."""

from .exclusion import FilterOptions, should_exclude, should_exclude_attribute
from .keys import KeyRegistry, generate_key
from .scanner import Scanner
from .syntax import SyntaxParser
from .wrapper import Wrapper

__all__ = [
    "FilterOptions",
    "KeyRegistry",
    "Scanner",
    "SyntaxParser",
    "Wrapper",
    "generate_key",
    "should_exclude",
    "should_exclude_attribute",
]
