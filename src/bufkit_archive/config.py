import os
from pathlib import Path

from .version import __version__

APP_VERSION = os.environ.get("APP_VERSION", __version__)

DATA_DIR_NAME = "data"
INDEX_FILE_NAME = "index.db"
BLOB_SUFFIX = ".buf.gz"

COMPRESSION_LEVEL = int(os.environ.get("BUFKIT_COMPRESSION_LEVEL", "6"))
SQLITE_TIMEOUT = float(os.environ.get("BUFKIT_SQLITE_TIMEOUT", "5"))


def _default_archive_root() -> Path:
    # 1) explicit override
    custom = os.environ.get("BUFKIT_ARCHIVE_ROOT")
    if custom:
        return Path(custom).expanduser()

    # 2) per-user location
    return Path.home() / "bufkit"


DEFAULT_ARCHIVE_ROOT = _default_archive_root()


def index_url(root: Path) -> str:
    return f"sqlite:///{Path(root) / INDEX_FILE_NAME}"
