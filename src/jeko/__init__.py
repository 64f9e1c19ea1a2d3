"""Jeko: a tree-walking scripting language interpreter."""

__version__ = "0.1.0"
