"""Locale catalog persistence."""

from .hashing import ContentHasher
from .locale_store import LocaleStore, FORBIDDEN_KEYS, sanitize_locale_data

__all__ = ["ContentHasher", "LocaleStore", "FORBIDDEN_KEYS", "sanitize_locale_data"]
