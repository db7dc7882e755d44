"""Broadside: a turn-based naval combat game engine."""

__version__ = "0.1.0"
