"""Core text helpers."""

from .normalize import normalize_text, strip_diacritics, tokenize

__all__ = ["normalize_text", "strip_diacritics", "tokenize"]
