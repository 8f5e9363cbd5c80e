"""Data model for a persisted locale catalog."""

from dataclasses import dataclass, field
from typing import Any, Dict, Union

# Nested key -> text mapping; leaves are always strings.
LocaleData = Dict[str, Union[str, "LocaleData"]]


@dataclass
class LocaleFile:
    """One locale's catalog as stored on disk."""

    locale: str
    data: LocaleData
    hash: str
    last_updated: str
    # key path -> content hash of the source text last translated for it
    source_hashes: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the on-disk JSON document."""
        document: Dict[str, Any] = {
            "locale": self.locale,
            "data": self.data,
            "hash": self.hash,
            "lastUpdated": self.last_updated,
        }
        if self.source_hashes:
            document["sourceHashes"] = dict(sorted(self.source_hashes.items()))
        return document

    @classmethod
    def from_dict(cls, document: Dict[str, Any]) -> "LocaleFile":
        """Build a LocaleFile from a parsed JSON document."""
        return cls(
            locale=document["locale"],
            data=document["data"],
            hash=document.get("hash", ""),
            last_updated=document.get("lastUpdated", ""),
            source_hashes=dict(document.get("sourceHashes") or {}),
        )
