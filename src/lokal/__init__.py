"""Extract, wrap and translate UI strings in JS/TS/JSX/TSX projects."""

from .cancellation import CancellationToken
from .config import AIConfig, ConfigLoader, LokalConfig
from .errors import (
    CatalogCorruption,
    ConfigError,
    IOFailure,
    LokalError,
    ParseFailure,
    ProviderFailure,
    SecurityViolation,
)
from .extraction import Scanner, Wrapper, generate_key, should_exclude
from .storage import ContentHasher, LocaleStore
from .translation import HashCache, SyncEngine, create_provider

__version__ = "0.1.0"

__all__ = [
    "AIConfig",
    "CancellationToken",
    "CatalogCorruption",
    "ConfigError",
    "ConfigLoader",
    "ContentHasher",
    "HashCache",
    "IOFailure",
    "LocaleStore",
    "LokalConfig",
    "LokalError",
    "ParseFailure",
    "ProviderFailure",
    "Scanner",
    "SecurityViolation",
    "SyncEngine",
    "Wrapper",
    "create_provider",
    "generate_key",
    "should_exclude",
]
