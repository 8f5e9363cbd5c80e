"""Incremental synchronisation of a target catalog against its source catalog."""

import copy
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from ..cancellation import is_cancelled
from ..errors import ProviderFailure
from ..models.locale_file import LocaleData, LocaleFile
from ..models.translation_result import SyncResult, TranslationRequest, TranslationResult
from ..storage.hashing import ContentHasher
from ..validation.placeholder_validator import PlaceholderValidator
from .providers.base import TranslationProvider

logger = logging.getLogger(__name__)

KeyPath = Tuple[str, ...]


def iter_leaves(data: LocaleData, path: KeyPath = ()) -> Iterator[Tuple[KeyPath, str]]:
    """Yield ``(path, text)`` for every string leaf, in catalog order."""
    for key, value in data.items():
        if isinstance(value, dict):
            yield from iter_leaves(value, path + (key,))
        elif isinstance(value, str):
            yield path + (key,), value


def flatten_keys(data: LocaleData) -> List[str]:
    """
    List the dot-path of every string leaf, in catalog order.

    Example:
        {"home": {"title": "Hi"}, "ok": "OK"} -> ["home.title", "ok"]
    """
    return [".".join(path) for path, _ in iter_leaves(data)]


def _as_path(key: Union[str, Sequence[str]]) -> KeyPath:
    return tuple(key.split(".")) if isinstance(key, str) else tuple(key)


def get_value_by_key(
    data: LocaleData, key: Union[str, Sequence[str]]
) -> Optional[Union[str, LocaleData]]:
    """Read the value at a dot-path (or path tuple), or None if any segment is missing."""
    current: Union[str, LocaleData] = data
    for part in _as_path(key):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def set_value_by_key(data: LocaleData, key: Union[str, Sequence[str]], value: str) -> None:
    """Write ``value`` at a dot-path (or path tuple), creating intermediate mappings."""
    parts = _as_path(key)
    current = data
    for part in parts[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[parts[-1]] = value


class HashCache:
    """
    Per-key content hash of the source text last translated successfully.

    Owned by one SyncEngine. It can be seeded from, and exported to, the
    ``sourceHashes`` section of a persisted locale file so the skip survives
    across runs.
    """

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._hashes: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    @classmethod
    def from_locale_file(cls, locale_file: Optional[LocaleFile]) -> "HashCache":
        """Seed from a stored catalog, ignoring hashes of keys no longer in it."""
        if locale_file is None:
            return cls()
        present = set(flatten_keys(locale_file.data))
        return cls({k: v for k, v in locale_file.source_hashes.items() if k in present})

    def get(self, key: str) -> Optional[str]:
        return self._hashes.get(key)

    def set(self, key: str, content_hash: str) -> None:
        with self._lock:
            self._hashes[key] = content_hash

    def matches(self, key: str, content_hash: str) -> bool:
        return self._hashes.get(key) == content_hash

    def to_dict(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._hashes)

    def __len__(self) -> int:
        return len(self._hashes)

    def __contains__(self, key: str) -> bool:
        return key in self._hashes


# (dot-path key, path, source text, source hash)
_Pending = Tuple[str, KeyPath, str, str]


class SyncEngine:
    """
    Fills in missing translations of a target catalog.

    For every leaf of the source catalog:

    1. Skip it if the target already holds a value different from the source
       text (treated as already translated).
    2. Otherwise skip it if its source hash matches the one recorded after
       its last successful translation.
    3. Otherwise request a translation, with the key as context.

    Requests go to the provider as one batch by default. Successful results
    are written into a copy of the target catalog; a failed result leaves
    that key's previous value alone and never affects its siblings.
    """

    def __init__(
        self,
        provider: TranslationProvider,
        batch_size: Optional[int] = None,
        max_concurrency: int = 1,
        validate_placeholders: bool = True,
        retranslate_changed: bool = False,
        hash_cache: Optional[HashCache] = None,
    ):
        """
        Initialize the sync engine.

        Args:
            provider: Translation provider capability
            batch_size: Maximum requests per batch call (None: a single batch)
            max_concurrency: Batches in flight at once (1: sequential)
            validate_placeholders: Reject translations that lose or add placeholders
            retranslate_changed: Also re-request translated keys whose source text
                changed since the recorded hash
            hash_cache: Cache to use, e.g. seeded from a stored catalog
        """
        if batch_size is not None and batch_size < 1:
            raise ValueError("batch_size must be positive")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self.provider = provider
        self.batch_size = batch_size
        self.max_concurrency = max_concurrency
        self.retranslate_changed = retranslate_changed
        self.hash_cache = hash_cache if hash_cache is not None else HashCache()
        self.validator = PlaceholderValidator() if validate_placeholders else None

    def translate_missing_keys(
        self,
        source: LocaleData,
        target: LocaleData,
        source_locale: str,
        target_locale: str,
        cancel=None,
    ) -> LocaleData:
        """
        Translate the keys the target catalog is missing.

        Returns:
            A new target catalog; ``target`` itself is never modified
        """
        return self.sync(source, target, source_locale, target_locale, cancel=cancel).data

    def sync(
        self,
        source: LocaleData,
        target: LocaleData,
        source_locale: str,
        target_locale: str,
        cancel=None,
    ) -> SyncResult:
        """
        Sync ``target`` against ``source`` and report what happened.

        Args:
            source: Source (default locale) catalog
            target: Target catalog
            source_locale: Source locale identifier
            target_locale: Target locale identifier
            cancel: Optional CancellationToken checked between batches

        Returns:
            SyncResult holding the new catalog and per-key outcomes
        """
        result = SyncResult(
            data=copy.deepcopy(target),
            source_locale=source_locale,
            target_locale=target_locale,
        )

        pending = self._collect_pending(source, result)
        if not pending:
            logger.debug("%s: nothing to translate", target_locale)
            return result

        batches = list(self._chunk(pending, self.batch_size or len(pending)))
        logger.info(
            "%s: translating %d keys in %d batch(es)", target_locale, len(pending), len(batches)
        )

        if self.max_concurrency == 1:
            for batch in batches:
                if is_cancelled(cancel):
                    result.cancelled = True
                    break
                outcomes = self._run_batch(batch, source_locale, target_locale)
                self._apply(batch, outcomes, result)
        else:
            with ThreadPoolExecutor(max_workers=self.max_concurrency) as executor:
                for window in self._chunk(batches, self.max_concurrency):
                    if is_cancelled(cancel):
                        result.cancelled = True
                        break
                    futures = [
                        executor.submit(self._run_batch, batch, source_locale, target_locale)
                        for batch in window
                    ]
                    # Applied in submission order so output never depends on timing
                    for batch, future in zip(window, futures):
                        self._apply(batch, future.result(), result)

        if result.failed:
            logger.warning(
                "%s: %d of %d translations failed",
                target_locale, len(result.failed), len(result.requested),
            )
        return result

    def _collect_pending(self, source: LocaleData, result: SyncResult) -> List[_Pending]:
        pending: List[_Pending] = []

        for path, source_value in iter_leaves(source):
            key = ".".join(path)
            if not source_value.strip():
                result.skipped += 1
                continue

            source_hash = ContentHasher.hash(source_value)
            target_value = get_value_by_key(result.data, path)

            if isinstance(target_value, str) and target_value and target_value != source_value:
                recorded = self.hash_cache.get(key)
                changed = recorded is not None and recorded != source_hash
                if not (self.retranslate_changed and changed):
                    result.skipped += 1
                    continue
            elif self.hash_cache.matches(key, source_hash):
                result.skipped += 1
                continue

            pending.append((key, path, source_value, source_hash))

        return pending

    def _run_batch(
        self,
        batch: List[_Pending],
        source_locale: str,
        target_locale: str,
    ) -> List[TranslationResult]:
        """Send one batch; always returns exactly one result per request."""
        requests = [
            TranslationRequest(
                source_text=text,
                source_locale=source_locale,
                target_locale=target_locale,
                context=key,
            )
            for key, _, text, _ in batch
        ]

        try:
            outcomes = list(self.provider.translate_batch(requests))
        except Exception as e:
            failure = e if isinstance(e, ProviderFailure) else ProviderFailure(
                type(self.provider).__name__, str(e)
            )
            logger.warning("Translation batch of %d failed: %s", len(requests), failure)
            return [TranslationResult.failure(r.source_text, failure.reason) for r in requests]

        if len(outcomes) != len(requests):
            logger.warning(
                "Provider returned %d results for %d requests", len(outcomes), len(requests)
            )
            missing = TranslationResult.failure("", "No result returned for this request")
            outcomes = outcomes[:len(requests)]
            outcomes += [missing] * (len(requests) - len(outcomes))

        return outcomes

    def _apply(
        self,
        batch: List[_Pending],
        outcomes: List[TranslationResult],
        result: SyncResult,
    ) -> None:
        for (key, path, text, source_hash), outcome in zip(batch, outcomes):
            result.requested.append(key)

            if not outcome.success or not outcome.translated_text:
                result.failed[key] = outcome.error or "Translation failed"
                continue

            if self.validator is not None:
                valid, issues = self.validator.validate(text, outcome.translated_text)
                if not valid:
                    result.failed[key] = self.validator.describe(issues)
                    continue

            set_value_by_key(result.data, path, outcome.translated_text)
            self.hash_cache.set(key, source_hash)
            result.translated.append(key)

    @staticmethod
    def _chunk(items: list, size: int) -> Iterator[list]:
        for start in range(0, len(items), size):
            yield items[start:start + size]
