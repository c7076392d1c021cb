"""Archive of BUFKIT soundings keyed by station, model and initialization time."""

from .archive import Archive
from .enums import Model, StateProv
from .errors import (
    ArchiveExistsError,
    ArchiveIOError,
    ArchiveNotFoundError,
    BlobDecodeError,
    BufkitArchiveError,
    ContentParseError,
    DuplicateFileError,
    DuplicateSiteError,
    IdentityMismatchError,
    IndexStoreError,
    InsufficientDataError,
    InvalidModelName,
    InvalidSiteId,
    InvalidStateProv,
    NotFoundError,
)
from .inventory import build_inventory
from .models import AddFileResult, AddStatus, CleanReport, Coords, FileRecord, Inventory, Site
from .version import __version__

__all__ = [
    "Archive",
    "Model",
    "StateProv",
    "Site",
    "Coords",
    "FileRecord",
    "Inventory",
    "AddFileResult",
    "AddStatus",
    "CleanReport",
    "build_inventory",
    "BufkitArchiveError",
    "ArchiveExistsError",
    "ArchiveIOError",
    "ArchiveNotFoundError",
    "BlobDecodeError",
    "ContentParseError",
    "DuplicateFileError",
    "DuplicateSiteError",
    "IdentityMismatchError",
    "IndexStoreError",
    "InsufficientDataError",
    "InvalidModelName",
    "InvalidSiteId",
    "InvalidStateProv",
    "NotFoundError",
    "__version__",
]
