from __future__ import annotations

import gzip
import logging
import os
import shutil
import tempfile
import zlib
from pathlib import Path
from typing import Set

from .config import COMPRESSION_LEVEL
from .errors import ArchiveIOError, BlobDecodeError

logger = logging.getLogger(__name__)


class BlobStore:
    """
    Gzip-compressed sounding text kept as one file per name in a single
    directory. No locking: concurrent writers to one name race and the last
    rename wins.
    """

    def __init__(self, directory: Path, compression_level: int = COMPRESSION_LEVEL) -> None:
        self.directory = Path(directory)
        self.compression_level = compression_level

    def path_for(self, name: str) -> Path:
        return self.directory / name

    def store(self, name: str, text: str) -> Path:
        target = self.path_for(name)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{name}.", suffix=".tmp")
            with os.fdopen(fd, "wb") as raw:
                with gzip.GzipFile(
                    filename="", mode="wb", fileobj=raw, compresslevel=self.compression_level
                ) as gz:
                    gz.write(text.encode("utf-8"))
            os.replace(tmp_name, target)
        except OSError as exc:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass
            raise ArchiveIOError(f"Unable to write {name}: {exc}") from exc
        logger.debug("stored blob %s", name)
        return target

    def load(self, name: str) -> str:
        path = self.path_for(name)
        try:
            with gzip.open(path, "rb") as gz:
                raw = gz.read()
        except (gzip.BadGzipFile, EOFError, zlib.error) as exc:
            raise BlobDecodeError(f"{name} is not a valid gzip stream: {exc}") from exc
        except OSError as exc:
            raise ArchiveIOError(f"Unable to read {name}: {exc}") from exc
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BlobDecodeError(f"{name} does not hold UTF-8 text") from exc

    def remove(self, name: str) -> None:
        try:
            self.path_for(name).unlink()
        except OSError as exc:
            raise ArchiveIOError(f"Unable to remove {name}: {exc}") from exc
        logger.debug("removed blob %s", name)

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def enumerate(self) -> Set[str]:
        try:
            return {entry.name for entry in self.directory.iterdir() if entry.is_file()}
        except OSError as exc:
            raise ArchiveIOError(f"Unable to list {self.directory}: {exc}") from exc

    def copy_to(self, name: str, other: "BlobStore") -> None:
        """Copy the compressed bytes unchanged into another store."""
        try:
            shutil.copyfile(self.path_for(name), other.path_for(name))
        except OSError as exc:
            raise ArchiveIOError(f"Unable to copy {name}: {exc}") from exc
