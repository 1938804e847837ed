"""Gemini client construction."""

from .client import create_gemini_client

__all__ = ["create_gemini_client"]
