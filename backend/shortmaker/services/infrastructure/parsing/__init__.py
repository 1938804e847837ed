"""
Parsing Module

Recovers JSON objects from provider responses.

Usage:
    from shortmaker.services.infrastructure.parsing import parse_provider_json
"""

from .json_parser import (
    parse_json_response,
    parse_provider_json,
    extract_largest_balanced_json,
    is_likely_truncated_json,
    fix_json_escapes,
    strip_code_fences,
)

__all__ = [
    "parse_json_response",
    "parse_provider_json",
    "extract_largest_balanced_json",
    "is_likely_truncated_json",
    "fix_json_escapes",
    "strip_code_fences",
]
