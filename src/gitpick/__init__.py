"""Fuzzy-picker front-end for everyday git and GitHub chores."""

__version__ = "0.3.0"
