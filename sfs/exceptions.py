"""Exceptions raised by sfs."""


class StorageError(Exception):
    """Base class."""


class NotFoundError(StorageError):
    """No file or record exists for the requested hash or id."""


class PersistenceError(StorageError):
    """The metadata store failed to create a record."""


class UpstreamError(StorageError):
    """Unexpected failure of the metadata store or the filesystem."""
