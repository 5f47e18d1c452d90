"""Metadata store interface consumed by :class:`sfs.FileStorage`."""

import uuid
from dataclasses import replace
from typing import Dict, List, Optional

from .models import FileId, StoredFile


class MetadataStore(object):
    """Interface describing how file metadata is persisted.

    Lookups return ``None`` when no record exists. Any exception they raise is
    treated as a failed lookup, never as absence.
    """

    async def get_file_by_id(self, id: FileId) -> Optional[StoredFile]:
        raise NotImplementedError

    async def get_file_by_hash(self, hash: str,
                               path: Optional[str] = None
                               ) -> Optional[StoredFile]:
        """Return a record whose content has `hash`, or ``None``.

        When records exist for `hash` at several logical paths, one at `path`
        must be returned if there is one. Otherwise any record will do.
        """
        raise NotImplementedError

    async def create_file(self, record: StoredFile) -> StoredFile:
        """Persist `record` and return the stored version of it."""
        raise NotImplementedError

    def uid(self) -> FileId:
        """Generate an identifier for a new record."""
        return str(uuid.uuid4())


def _copy(record: StoredFile) -> StoredFile:
    return replace(record, url=None, extra=dict(record.extra))


class InMemoryMetadataStore(MetadataStore):
    """Keep records in a dict keyed by id. Records are copied in and out, so
    callers decorating a returned record never alter the stored one.
    """

    def __init__(self, records: Optional[List[StoredFile]] = None):
        self.records: Dict[FileId, StoredFile] = {}
        for record in records or ():
            self.records[record.id] = _copy(record)

    def __len__(self) -> int:
        return len(self.records)

    def by_hash(self, hash: str) -> List[StoredFile]:
        return [_copy(record) for record in self.records.values()
                if record.hash == hash]

    async def get_file_by_id(self, id: FileId) -> Optional[StoredFile]:
        record = self.records.get(id)
        return _copy(record) if record is not None else None

    async def get_file_by_hash(self, hash: str,
                               path: Optional[str] = None
                               ) -> Optional[StoredFile]:
        matches = self.by_hash(hash)
        for record in matches:
            if record.path == path:
                return record
        return matches[0] if matches else None

    async def create_file(self, record: StoredFile) -> StoredFile:
        if record.id in self.records:
            raise ValueError(
                "A record with id {0!r} already exists".format(record.id))
        self.records[record.id] = _copy(record)
        return _copy(record)
