"""
FastAPI Routes (API 전용).
"""

from . import generate, templates

__all__ = ["generate", "templates"]
