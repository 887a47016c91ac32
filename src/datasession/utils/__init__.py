"""Utility helpers for datasession."""

from .timer import Timer

__all__ = ["Timer"]
