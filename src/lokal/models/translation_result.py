"""Data models for translation requests, results and sync runs."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .locale_file import LocaleData


@dataclass
class TranslationRequest:
    """A single string to translate."""

    source_text: str
    source_locale: str
    target_locale: str
    context: Optional[str] = None  # the catalog key


@dataclass
class TranslationResult:
    """Represents the result of translating a single request."""

    translated_text: str
    source_text: str = ""
    success: bool = True
    error: Optional[str] = None

    @classmethod
    def failure(cls, source_text: str, error: str) -> "TranslationResult":
        """Build a failed result."""
        return cls(translated_text="", source_text=source_text, success=False, error=error)


@dataclass
class SyncResult:
    """Outcome of syncing one target catalog against its source."""

    data: LocaleData
    source_locale: str
    target_locale: str
    requested: List[str] = field(default_factory=list)
    translated: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)  # key -> error
    skipped: int = 0
    cancelled: bool = False

    @property
    def success(self) -> bool:
        """True when every requested key was translated."""
        return not self.failed and not self.cancelled

    @property
    def partial(self) -> bool:
        """True when some, but not all, requested keys were translated."""
        return bool(self.translated) and bool(self.failed)
