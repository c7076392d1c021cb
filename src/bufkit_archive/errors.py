"""Errors raised by the archive.

Every failure surfaces to the immediate caller as one of these types. Lookups
that find nothing raise :class:`NotFoundError` so callers can tell "absent"
apart from "broken".
"""


class BufkitArchiveError(Exception):
    """Base class for all archive errors."""


class ArchiveIOError(BufkitArchiveError):
    """Filesystem failure while touching the blob directory or archive root."""


class ArchiveExistsError(BufkitArchiveError):
    pass


class ArchiveNotFoundError(BufkitArchiveError):
    pass


class BlobDecodeError(BufkitArchiveError):
    """A blob exists but is not a valid gzip stream of UTF-8 text."""


class IndexStoreError(BufkitArchiveError):
    """Constraint violation or query failure in the index."""


class DuplicateSiteError(IndexStoreError):
    def __init__(self, station_num: int) -> None:
        super().__init__(f"site {station_num} already exists")
        self.station_num = station_num


class DuplicateFileError(IndexStoreError):
    def __init__(self, file_name: str) -> None:
        super().__init__(f"file name {file_name} is registered under a different key")
        self.file_name = file_name


class NotFoundError(BufkitArchiveError):
    """Nothing in the index matches the request."""


class ContentParseError(BufkitArchiveError):
    """Sounding text could not be parsed for station identity or times."""


class IdentityMismatchError(BufkitArchiveError):
    def __init__(self, hint: str, parsed: str) -> None:
        super().__init__(f"site id hint {hint!r} does not match id {parsed!r} in file")
        self.hint = hint
        self.parsed = parsed


class InsufficientDataError(BufkitArchiveError):
    pass


class InvalidEnumValue(BufkitArchiveError, ValueError):
    pass


class InvalidModelName(InvalidEnumValue):
    pass


class InvalidStateProv(InvalidEnumValue):
    pass


class InvalidSiteId(BufkitArchiveError, ValueError):
    """A site id that cannot be used in a blob file name."""
