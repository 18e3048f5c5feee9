"""Shared helpers."""

from tinytype.utils.location import Location

__all__ = ["Location"]
