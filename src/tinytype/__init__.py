"""Type checkers for tiny TypeScript-like languages with equirecursive types."""

from loguru import logger

from tinytype.core import TypeChecker, TypeEnv, Variant, is_subtype, type_equal, typecheck
from tinytype.surface import ParseError, parse, parse_type

# Silent as a library; configure_logging turns it back on
logger.disable("tinytype")

__all__ = [
    "ParseError",
    "TypeChecker",
    "TypeEnv",
    "Variant",
    "is_subtype",
    "parse",
    "parse_type",
    "type_equal",
    "typecheck",
]
