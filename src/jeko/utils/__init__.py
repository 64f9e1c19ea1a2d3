"""Shared helpers."""

from jeko.utils.location import Location

__all__ = ["Location"]
