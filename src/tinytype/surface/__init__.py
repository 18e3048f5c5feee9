"""Surface syntax: parsing source text into core terms and types."""

from tinytype.surface.parser import ParseError, Parser, parse, parse_type

__all__ = [
    "ParseError",
    "Parser",
    "parse",
    "parse_type",
]
