"""Data models for the localization pipeline."""

from .extracted_string import (
    ExtractedString,
    ScanResult,
    WrappedString,
    WrapResult,
    DirectoryWrapResult,
)
from .locale_file import LocaleData, LocaleFile
from .translation_result import TranslationRequest, TranslationResult, SyncResult

__all__ = [
    "ExtractedString",
    "ScanResult",
    "WrappedString",
    "WrapResult",
    "DirectoryWrapResult",
    "LocaleData",
    "LocaleFile",
    "TranslationRequest",
    "TranslationResult",
    "SyncResult",
]
