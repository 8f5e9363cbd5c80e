"""Directory traversal for source files."""

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence

from ..config import DEFAULT_EXTENSIONS

logger = logging.getLogger(__name__)

DEPENDENCY_DIRS = frozenset({"node_modules", "bower_components", "jspm_packages"})


def iter_source_files(
    root: Path,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    exclude_dirs: Optional[Iterable[Path]] = None,
) -> Iterator[Path]:
    """
    Yield source files under ``root`` in a stable (sorted) order.

    Hidden entries, dependency directories and any directory in
    ``exclude_dirs`` (typically the locale output directory) are skipped.
    """
    root = Path(root)
    wanted = {ext.lower() for ext in extensions}
    excluded = {Path(p).resolve() for p in (exclude_dirs or [])}

    def scan(directory: Path) -> Iterator[Path]:
        try:
            entries = sorted(os.scandir(directory), key=lambda e: e.name)
        except OSError as e:
            logger.warning("Cannot list %s: %s", directory, e)
            return

        for entry in entries:
            if entry.name.startswith(".") or entry.name in DEPENDENCY_DIRS:
                continue
            path = Path(entry.path)
            if entry.is_dir(follow_symlinks=False):
                if path.resolve() in excluded:
                    continue
                yield from scan(path)
            elif entry.is_file() and path.suffix.lower() in wanted:
                yield path

    if root.is_file():
        if root.suffix.lower() in wanted:
            yield root
        return

    yield from scan(root)
