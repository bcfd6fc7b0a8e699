"""Intenus intent parameter resolver."""

__version__ = "0.1.0"
