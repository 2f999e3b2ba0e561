"""Scripted multi-bot coverage solver for polygon grid arenas."""

__version__ = "0.1.0"
