from __future__ import annotations

import fnmatch
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Optional

from .config import LibrarySettings


class LibraryScanner:
    """Walks the library roots and yields the NSF files worth decoding."""

    def __init__(self, settings: LibrarySettings) -> None:
        self.settings = settings
        self._exts = {ext.lower() for ext in self.settings.include_extensions}

    def iter_files(self, paths: Optional[Iterable[Path]] = None) -> Iterator[Path]:
        """Yield NSF files under the library roots, or under `paths` when given.

        Missing library roots are skipped. Explicitly named paths that are
        not directories are yielded as-is, missing or not, so the reader
        reports them.
        """
        explicit = paths is not None
        targets = list(paths) if explicit else list(self.settings.roots)
        for target in targets:
            if explicit and not target.is_dir():
                yield target
                continue
            if not target.is_dir():
                continue
            for file_path in sorted(target.rglob("*")):
                if not file_path.is_file():
                    continue
                if not self.accepts(file_path):
                    continue
                yield file_path

    def accepts(self, path: Path) -> bool:
        if path.suffix.lower() not in self._exts:
            return False
        rel = str(path)
        for pattern in self.settings.exclude_patterns:
            if fnmatch.fnmatch(rel, pattern):
                return False
        return True
