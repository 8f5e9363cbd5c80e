"""Content hashes for incremental sync."""

import hashlib
import json

from ..models.locale_file import LocaleData


class ContentHasher:
    """Digests used to detect changed strings and catalogs."""

    @staticmethod
    def hash(content: str) -> str:
        """Hex digest of a string's content."""
        return hashlib.md5(content.encode("utf-8")).hexdigest()

    @staticmethod
    def canonical_json(data: LocaleData) -> str:
        """Serialize a catalog with keys sorted at every depth."""
        return json.dumps(data, sort_keys=True, ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def hash_locale_data(cls, data: LocaleData) -> str:
        """Hash a catalog independently of its key order."""
        return cls.hash(cls.canonical_json(data))
