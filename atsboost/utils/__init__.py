"""Utility modules."""

from .parser import extract_json, parse_analysis_response
from .text import content_hash, truncate_cv

__all__ = ["extract_json", "parse_analysis_response", "truncate_cv", "content_hash"]
