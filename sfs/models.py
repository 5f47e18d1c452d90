"""Records and value types passed around by :class:`sfs.FileStorage`."""

import io
import os
from collections import namedtuple
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Union

FileId = Union[str, int]

#: Logical path used when the caller doesn't provide one.
ROOT_PATH = "/"


@dataclass
class StoredFile:
    """Metadata record of a stored file.

    Attributes:
        id: Identifier, unique within the metadata store.
        name: Originally declared file name.
        extension: Leading-dot extension, possibly empty.
        hash: Hex content digest. The physical file is ``<hash><extension>``.
        size: Content length in bytes.
        type: Coarse category derived from the extension.
        last_modified: Time of the metadata write, in milliseconds since the
            epoch.
        path: Logical grouping of the record, unrelated to the disk location.
        url: Public URL, derived from ``id`` on read and never stored.
        extra: Additional caller supplied fields.
    """

    id: FileId
    name: str
    extension: str
    hash: str
    size: int
    type: str
    last_modified: int
    path: str = ROOT_PATH
    url: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def core_fields(cls):
        return tuple(f.name for f in fields(cls) if f.name != "extra")

    def to_dict(self) -> Dict[str, Any]:
        """Return a flat mapping with :attr:`extra` merged into the top level."""
        data = {name: getattr(self, name) for name in self.core_fields()}
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoredFile":
        """Build a record from a flat mapping. Unknown keys go to :attr:`extra`."""
        core = cls.core_fields()
        kwargs = {key: value for key, value in data.items() if key in core}
        extra = {key: value for key, value in data.items() if key not in core}
        return cls(extra=extra, **kwargs)


@dataclass
class Upload:
    """An uploaded blob: its declared name and its content."""

    name: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_stream(cls, obj, name: Optional[str] = None) -> "Upload":
        """Read a whole upload from a readable object or a path to a file.

        A readable object is returned to its original position afterwards.
        """
        if hasattr(obj, "read"):
            pos = obj.tell()
            obj.seek(0)
            data = obj.read()
            obj.seek(pos)
            if name is None:
                name = os.path.basename(getattr(obj, "name", "") or "")
        elif isinstance(obj, (str, os.PathLike)) and os.path.isfile(obj):
            with io.open(obj, "rb") as fileobj:
                data = fileobj.read()
            if name is None:
                name = os.path.basename(os.fspath(obj))
        else:
            raise ValueError(
                "Object must be a valid file path or a readable object.")

        if isinstance(data, str):
            data = data.encode("utf8")

        return cls(name=name or "", data=data)


class HashAddress(namedtuple("HashAddress", ["id", "relpath", "is_duplicate"])):
    """File address containing the content hash, the path inside the backing
    filesystem and whether the content was already on disk.
    """

    def __new__(cls, id, relpath, is_duplicate=False):
        return super(HashAddress, cls).__new__(cls, id, relpath, is_duplicate)


class ResolvedFile(namedtuple("ResolvedFile", ["path", "name"])):
    """Physical path of a stored file and its originally declared name."""


class DiskUsage(namedtuple("DiskUsage", ["disk_path", "free", "size"])):
    """Free and total bytes of the disk holding the storage root."""
