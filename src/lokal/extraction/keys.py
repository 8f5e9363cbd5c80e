"""Deterministic translation key generation."""

import hashlib
import re
from pathlib import PurePath
from typing import Dict, Optional

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def short_hash(text: str, length: int = 6) -> str:
    """Short, stable hex digest of ``text``."""
    return hashlib.sha1(text.encode("utf-8")).hexdigest()[:length]


def slugify(text: str) -> str:
    """Lowercase, drop everything but ``[a-z0-9]``/whitespace, join words with ``_``."""
    cleaned = _NON_SLUG_CHARS.sub("", text.lower()).strip()
    return _WHITESPACE.sub("_", cleaned)


def generate_key(text: str, file_identity: str, prefix: str = "") -> str:
    """
    Generate the lookup key for a literal.

    Args:
        text: The literal text
        file_identity: Path of the file the literal lives in; only its stem is used
        prefix: Optional configured key prefix

    Returns:
        ``<prefix>_<file stem>_<slug>`` (prefix part omitted when empty)
    """
    slug = slugify(text)
    if not slug:
        # Nothing ASCII to build a slug from (e.g. non-Latin text)
        slug = short_hash(text)

    stem = PurePath(file_identity).stem
    head = f"{prefix}_" if prefix else ""
    return f"{head}{stem}_{slug}"


class KeyRegistry:
    """
    Per-file namespace of generated keys.

    The same text always maps to the same key. A different text that
    normalizes to a key already taken gets a short hash of its full text
    appended, so keys stay unique within the file. Keys reserved up front
    (from calls already present in the file) count as taken by an unknown
    text.
    """

    def __init__(self, file_identity: str, prefix: str = ""):
        self.file_identity = file_identity
        self.prefix = prefix
        self._texts_by_key: Dict[str, Optional[str]] = {}

    def reserve(self, key: str) -> None:
        """Mark ``key`` as already used by the file."""
        self._texts_by_key.setdefault(key, None)

    def key_for(self, text: str) -> str:
        """Get the key for ``text``, disambiguating on collision."""
        key = generate_key(text, self.file_identity, self.prefix)
        if key in self._texts_by_key and self._texts_by_key[key] != text:
            key = f"{key}_{short_hash(text)}"
        if self._texts_by_key.get(key) is None:
            self._texts_by_key[key] = text
        return key

    def __len__(self) -> int:
        return len(self._texts_by_key)
