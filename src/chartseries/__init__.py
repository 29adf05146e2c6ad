"""Renderer-agnostic time-series processing for chart configuration."""

__version__ = "1.0.0"
