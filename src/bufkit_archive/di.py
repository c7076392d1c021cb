from __future__ import annotations

from pathlib import Path
from typing import Optional

from .archive import Archive
from .config import DEFAULT_ARCHIVE_ROOT, INDEX_FILE_NAME


class Container:
    """Hands out one archive handle per process for the configured root."""

    def __init__(self, root: Optional[Path] = None) -> None:
        self.root = Path(root) if root is not None else DEFAULT_ARCHIVE_ROOT
        self._archive: Optional[Archive] = None

    def ensure_ready(self) -> None:
        if self._archive is not None:
            return
        if (self.root / INDEX_FILE_NAME).exists():
            self._archive = Archive.connect(self.root)
        else:
            self._archive = Archive.create(self.root)

    def archive(self) -> Archive:
        self.ensure_ready()
        assert self._archive is not None
        return self._archive

    def close(self) -> None:
        if self._archive is not None:
            self._archive.close()
            self._archive = None


_container: Container | None = None


def get_container() -> Container:
    global _container
    if _container is None:
        _container = Container()
    return _container
