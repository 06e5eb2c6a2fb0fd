"""Funding allocation and payment notification engine."""

__version__ = "0.1.0"
