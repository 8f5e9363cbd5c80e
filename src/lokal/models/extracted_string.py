"""Data models for strings found in, or wrapped into, source files."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ExtractedString:
    """A translation string found by the scanner."""

    key: str
    value: str
    file: str
    line: int  # 1-based
    column: int  # 0-based


@dataclass
class ScanResult:
    """Strings and per-file errors collected by a scan."""

    strings: List[ExtractedString] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    files_scanned: int = 0
    cancelled: bool = False

    def extend(self, other: "ScanResult") -> None:
        """Fold another result into this one."""
        self.strings.extend(other.strings)
        self.errors.extend(other.errors)
        self.files_scanned += other.files_scanned

    def unique_keys(self) -> dict:
        """Get the extracted strings keyed by key (last occurrence wins)."""
        return {s.key: s for s in self.strings}


@dataclass
class WrappedString:
    """A literal that was (or would be) replaced by a translation call."""

    original: str
    wrapped: str
    key: str
    line: int
    column: int = 0


@dataclass
class WrapResult:
    """Result of wrapping a single file."""

    file: str
    wrapped: List[WrappedString] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    modified: bool = False
    new_source: Optional[str] = None
    import_added: bool = False
    written: bool = False  # False in dry-run mode

    @property
    def success(self) -> bool:
        """Check if the file was processed without errors."""
        return not self.errors


@dataclass
class DirectoryWrapResult:
    """Aggregate of per-file wrap results for a directory walk."""

    results: List[WrapResult] = field(default_factory=list)
    modified_files: int = 0
    cancelled: bool = False

    @property
    def errors(self) -> List[str]:
        return [error for result in self.results for error in result.errors]

    @property
    def total_wrapped(self) -> int:
        return sum(len(result.wrapped) for result in self.results)

    def new_keys(self) -> dict:
        """Get ``{key: original text}`` for every wrapped string."""
        keys = {}
        for result in self.results:
            for item in result.wrapped:
                keys[item.key] = item.original
        return keys
