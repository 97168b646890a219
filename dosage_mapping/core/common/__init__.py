"""Common base classes and utilities for core functionality."""

from .base_mapper import BaseFormatConverter

__all__ = ["BaseFormatConverter"]
