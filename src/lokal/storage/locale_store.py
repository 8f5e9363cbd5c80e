"""File system persistence for locale catalogs."""

import copy
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..errors import CatalogCorruption, IOFailure, SecurityViolation
from ..models.locale_file import LocaleData, LocaleFile
from .hashing import ContentHasher

logger = logging.getLogger(__name__)

# Never copied out of incoming catalog data, at any depth
FORBIDDEN_KEYS = frozenset({"__proto__", "constructor", "prototype"})


def sanitize_locale_data(data: Any, drop_forbidden: bool = True) -> LocaleData:
    """
    Copy a catalog keeping only string leaves and mapping nodes.

    Leaves that are not strings are dropped. Forbidden keys are dropped at
    every depth too, unless ``drop_forbidden`` is False; saving keeps them so
    a stored catalog loads back unchanged.
    """
    if not isinstance(data, dict):
        return {}

    clean: LocaleData = {}
    for key, value in data.items():
        if not isinstance(key, str) or (drop_forbidden and key in FORBIDDEN_KEYS):
            continue
        if isinstance(value, str):
            clean[key] = value
        elif isinstance(value, dict):
            clean[key] = sanitize_locale_data(value, drop_forbidden)
        else:
            logger.debug("Dropping non-string catalog value at %r", key)
    return clean


def _is_locale_data(data: Any) -> bool:
    if not isinstance(data, dict):
        return False
    for key, value in data.items():
        if not isinstance(key, str):
            return False
        if not isinstance(value, str) and not _is_locale_data(value):
            return False
    return True


def _merge_preserving(existing: LocaleData, incoming: LocaleData) -> LocaleData:
    """Recursively merge ``incoming`` into ``existing``; existing leaves win."""
    result: LocaleData = {}
    for key, value in existing.items():
        if key not in FORBIDDEN_KEYS:
            result[key] = copy.deepcopy(value)

    for key, value in incoming.items():
        if key in FORBIDDEN_KEYS:
            continue
        if key not in result:
            result[key] = copy.deepcopy(value)
        elif isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_preserving(result[key], value)
        # otherwise the existing leaf (or subtree) wins

    return result


class LocaleStore:
    """
    Reads and writes ``<locale>.json`` catalogs under one storage root.

    Every locale identifier is checked against the root before any file is
    touched; identifiers that could escape it raise ``SecurityViolation``.
    """

    def __init__(self, base_path: Path):
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.warnings: List[str] = []

    def _get_locale_path(self, locale: str) -> Path:
        """Resolve the catalog path for a locale, refusing anything outside the root."""
        if not isinstance(locale, str) or not locale.strip():
            raise SecurityViolation(f"Invalid locale identifier: {locale!r}")

        if ".." in locale:
            raise SecurityViolation(f"Invalid locale path contains traversal: {locale}")

        if "/" in locale or "\\" in locale or "\0" in locale or os.path.isabs(locale):
            raise SecurityViolation(f"Invalid locale path access outside of storage directory: {locale}")

        target = Path(os.path.abspath(os.path.join(self.base_path, f"{locale}.json")))
        if target.parent != self.base_path:
            raise SecurityViolation(f"Invalid locale path access outside of storage directory: {locale}")

        return target

    def _warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning(message)

    def load_locale(self, locale: str) -> Optional[LocaleFile]:
        """
        Load a locale catalog.

        Args:
            locale: Locale identifier, e.g. "en"

        Returns:
            LocaleFile, or None if the file is missing or malformed
        """
        path = self._get_locale_path(locale)
        if not path.exists():
            return None

        try:
            document = json.loads(path.read_text(encoding="utf-8"))
            return self._parse_document(locale, document)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, CatalogCorruption) as e:
            self._warn(f"Failed to load locale {locale}: {e}")
            return None

    @staticmethod
    def _parse_document(locale: str, document: Any) -> LocaleFile:
        if not isinstance(document, dict):
            raise CatalogCorruption("expected a JSON object")
        if not _is_locale_data(document.get("data")):
            raise CatalogCorruption("\"data\" must be a nested mapping of strings")

        hashes = document.get("sourceHashes") or {}
        if not isinstance(hashes, dict) or not all(isinstance(v, str) for v in hashes.values()):
            raise CatalogCorruption("\"sourceHashes\" must map keys to strings")

        document = dict(document)
        document.setdefault("locale", locale)
        return LocaleFile.from_dict(document)

    def save_locale(
        self,
        locale: str,
        data: LocaleData,
        source_hashes: Optional[Dict[str, str]] = None,
    ) -> LocaleFile:
        """
        Save a locale catalog, replacing the previous document atomically.

        Args:
            locale: Locale identifier
            data: The catalog
            source_hashes: Optional per-key source content hashes to persist

        Returns:
            The LocaleFile that was written
        """
        path = self._get_locale_path(locale)
        clean = sanitize_locale_data(data, drop_forbidden=False)

        locale_file = LocaleFile(
            locale=locale,
            data=clean,
            hash=ContentHasher.hash_locale_data(clean),
            last_updated=datetime.now(timezone.utc).isoformat(),
            source_hashes=dict(source_hashes or {}),
        )

        self._write_atomic(path, json.dumps(locale_file.to_dict(), indent=2, ensure_ascii=False) + "\n")
        logger.debug("Saved %s (%s)", path, locale_file.hash)
        return locale_file

    def _write_atomic(self, path: Path, content: str) -> None:
        """Write to a temporary file in the same directory, then rename over ``path``."""
        fd, tmp_name = tempfile.mkstemp(dir=self.base_path, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise IOFailure(str(path), str(e)) from e

    def load_all_locales(self) -> Dict[str, LocaleFile]:
        """Load every readable catalog in the storage root."""
        locales = {}
        for locale in self.get_available_locales():
            locale_file = self.load_locale(locale)
            if locale_file:
                locales[locale] = locale_file
        return locales

    def get_available_locales(self) -> List[str]:
        """List locales that have a catalog file."""
        if not self.base_path.exists():
            return []

        locales = []
        for path in sorted(self.base_path.glob("*.json")):
            if path.name.startswith(".") or ".." in path.stem:
                continue
            locales.append(path.stem)
        return locales

    def locale_exists(self, locale: str) -> bool:
        """Check if a locale catalog exists."""
        return self._get_locale_path(locale).exists()

    def delete_locale(self, locale: str) -> bool:
        """Delete a locale catalog; False if there was none."""
        path = self._get_locale_path(locale)
        if path.exists():
            path.unlink()
            return True
        return False

    def merge_locale_data(
        self,
        locale: str,
        new_data: LocaleData,
        preserve_existing: bool = True,
    ) -> LocaleData:
        """
        Merge new keys into the persisted catalog for ``locale``.

        Args:
            locale: Locale identifier
            new_data: Incoming catalog (e.g. freshly scanned default values)
            preserve_existing: Keep existing leaf values over incoming ones

        Returns:
            The merged catalog (not saved)
        """
        incoming = sanitize_locale_data(new_data)
        existing = self.load_locale(locale)

        if not existing:
            return incoming

        if preserve_existing:
            return _merge_preserving(existing.data, incoming)

        return incoming
