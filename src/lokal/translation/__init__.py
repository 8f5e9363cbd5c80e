"""Catalog synchronisation and translation providers."""

from .providers import create_provider, TranslationProvider
from .sync_engine import (
    HashCache,
    SyncEngine,
    flatten_keys,
    get_value_by_key,
    set_value_by_key,
)

__all__ = [
    "HashCache",
    "SyncEngine",
    "TranslationProvider",
    "create_provider",
    "flatten_keys",
    "get_value_by_key",
    "set_value_by_key",
]
