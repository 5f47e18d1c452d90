"""Module for FileStorage class."""

import asyncio
import io
import logging
import shutil
import time
import uuid
from typing import Any, Dict, Iterable, Optional, Union
from urllib.parse import unquote

import fs as pyfs
from fs.errors import NoSysPath, ResourceNotFound
from fs.permissions import Permissions
from fs.tools import remove_empty

import sfs.utils as u
from .exceptions import NotFoundError, PersistenceError, StorageError, UpstreamError
from .extensions import category_for, resolve_extension
from .models import (
    ROOT_PATH,
    DiskUsage,
    FileId,
    HashAddress,
    ResolvedFile,
    StoredFile,
    Upload,
)
from .store import MetadataStore

log = logging.getLogger(__name__)

Key = Union[str, HashAddress]


class FileStorage(object):
    """Content addressable file storage with metadata kept in a
    :class:`~sfs.store.MetadataStore`.

    Every physical file is named after its content hash plus extension, so
    identical uploads share one file on disk however many metadata records
    point at it.

    Attributes:
        root: Directory path, FS URL or PyFilesystem2 ``FS`` used as root of
            storage space.
        mask: URL prefix that file ids are appended to.
        store: Metadata store records are read from and written to.
        depth (int, optional): Depth of subfolders to create when saving a
            file. Defaults to ``0`` which keeps all files directly under the
            root.
        width (int, optional): Width of each subfolder to create when saving a
            file.
        algorithm (str): Hash algorithm to use when computing file hash.
            Algorithm should be available in ``hashlib`` and produce at least
            256-bit digests. Defaults to ``'sha256'``.
        dmode (int, optional): Directory mode permission to set for
            subdirectories. Defaults to ``0o755``.
        allow_duplicates (bool, optional): Create a new metadata record even
            when the same content already has one at the same logical path.
        logger (optional): Logger receiving the storage's messages. Defaults
            to the ``sfs.storage`` logger.
    """

    def __init__(self,
                 root: Union[pyfs.base.FS, str],
                 mask: str,
                 store: MetadataStore,
                 depth: int = 0,
                 width: int = 2,
                 algorithm: str = "sha256",
                 dmode: int = 0o755,
                 allow_duplicates: bool = False,
                 logger: Optional[Union[logging.Logger,
                                        logging.LoggerAdapter]] = None):

        self.fs = u.load_fs(root)
        self.mask = mask
        self.store = store
        self.depth = depth
        self.width = width
        self.algorithm = u.check_algorithm(algorithm)
        self.dmode = dmode
        self.allow_duplicates = allow_duplicates
        self.logger = logger or log
        self._owns_fs = self.fs is not root
        self._locks = u.HashLocks()

    @classmethod
    def from_settings(cls, store: MetadataStore, settings=None, **kwargs):
        """Build a storage from :class:`~sfs.config.StorageSettings`, or from
        the environment when `settings` is omitted. Keyword arguments override
        individual settings.
        """
        from .config import get_settings

        settings = settings or get_settings()
        options = settings.model_dump()
        options.update(kwargs)
        return cls(store=store, **options)

    def close(self) -> None:
        """Close the backing filesystem if this storage opened it."""
        if self._owns_fs:
            self.fs.close()

    def id_to_url(self, id: FileId) -> str:
        """Return the public URL of file `id`."""
        return u.id_to_url(self.mask, id)

    def url_to_id(self, url: str) -> str:
        """Return the file id a public `url` was built from."""
        return u.url_to_id(self.mask, url)

    def physical_path(self, hash: str, extension: str = "") -> str:
        """Return the path on disk of the content `hash` stored with
        `extension`. Filesystems without system paths yield the path relative
        to their root.
        """
        return self._syspath(self._hashid_to_path(hash, extension))

    async def resolve_file_path(self, id: FileId) -> Optional[ResolvedFile]:
        """Return the physical path and declared name of file `id`, or ``None``
        when the file is unknown or the lookup failed.
        """
        record = await self._lookup(id)
        if record is None:
            return None

        return ResolvedFile(self.physical_path(record.hash, record.extension),
                            record.name)

    async def save_file(self,
                        upload: Upload,
                        file_path: Optional[str] = None,
                        id: Optional[FileId] = None,
                        additional_data: Optional[Dict[str, Any]] = None
                        ) -> StoredFile:
        """Store `upload` on disk unless its content is already stored, and
        record its metadata.

        Args:
            upload: Declared name and content of the file.
            file_path: Logical path of the record. Defaults to ``"/"``.
            id: Id of the new record. Generated by the store when omitted.
            additional_data: Extra fields stored with the record.

        Returns:
            The created record, or the existing one when the same content is
            already recorded at `file_path` and duplicates aren't allowed.
            Its ``url`` is set.

        Raises:
            TypeError: If `upload.data` isn't bytes.
            ValueError: If `additional_data` overrides a core field.
            PersistenceError: If the store failed to create the record. A file
                written by this call is removed first.
            UpstreamError: If the store or the filesystem failed otherwise.
        """
        file_path = file_path or ROOT_PATH
        extra = dict(additional_data or {})
        reserved = sorted(set(extra).intersection(StoredFile.core_fields()))
        if reserved:
            raise ValueError(
                "additional_data may not override: {0}".format(
                    ", ".join(reserved)))

        if not isinstance(upload.data, (bytes, bytearray, memoryview)):
            raise TypeError(
                "Upload data must be bytes, not {0}".format(
                    type(upload.data).__name__))

        name = unquote(upload.name or "")
        hashid = self._computehash(upload.data)

        async with self._locks.hold(hashid):
            try:
                return await self._save(upload.data, name, hashid, file_path,
                                        id, extra)
            except StorageError:
                raise
            except Exception as err:
                self.logger.error("Upload error: %s", name, exc_info=True)
                raise UpstreamError(
                    "Could not save {0!r}: {1}".format(name, err)) from err

    async def delete_file_by_hash(self, hash: str) -> None:
        """Delete the physical file holding content `hash`. Metadata records
        are left to the store.

        Raises:
            NotFoundError: If no file with that hash is stored.
        """
        try:
            path = None
            if u.is_hexdigest(hash):
                path = await asyncio.to_thread(self._fs_path, hash)
            if path is None:
                raise NotFoundError(
                    "File with hash {0} not found in {1}".format(hash, self.fs))
            await asyncio.to_thread(self._delete, path)
        except StorageError:
            raise
        except Exception as err:
            raise UpstreamError(
                "Could not delete file with hash {0}: {1}".format(hash, err)
            ) from err

        self.logger.info("Deleted %s", path)

    async def delete_file_by_id(self, id: FileId) -> None:
        """Delete the physical file of record `id`. The record itself is left
        to the store and may now point at a missing file.

        Raises:
            NotFoundError: If the record or its physical file doesn't exist.
        """
        record = await self._lookup(id)
        if record is None:
            raise NotFoundError("File with id {0} not found".format(id))

        path = self._hashid_to_path(record.hash, record.extension)
        try:
            if not await asyncio.to_thread(self.fs.isfile, path):
                raise NotFoundError(
                    "File {0} of id {1} not found".format(path, id))
            await asyncio.to_thread(self._delete, path)
        except StorageError:
            raise
        except Exception as err:
            raise UpstreamError(
                "Could not delete file with id {0}: {1}".format(id, err)
            ) from err

        self.logger.info("Deleted %s (id %s)", path, id)

    async def get_disk_usage(self) -> DiskUsage:
        """Return free and total space of the disk holding the storage root."""
        try:
            syspath = self.fs.getsyspath("/")
        except NoSysPath as err:
            raise StorageError(
                "{0} has no system path to measure".format(self.fs)) from err

        try:
            usage = await asyncio.to_thread(shutil.disk_usage, syspath)
        except OSError as err:
            raise UpstreamError(
                "Could not measure {0}: {1}".format(syspath, err)) from err
        return DiskUsage(syspath, usage.free, usage.total)

    def open(self, k: Key, mode: str = "rb") -> io.IOBase:
        """Return open IOBase object from given hash or path.

        Raises:
            IOError: If file doesn't exist.
        """
        path = self._fs_path(k)
        if path is None:
            raise IOError("Could not locate file: {0}".format(k))

        return self.fs.open(path, mode)

    def exists(self, k: Key) -> bool:
        """Check whether a given hash or path exists on disk."""
        return bool(self._fs_path(k))

    def files(self) -> Iterable[str]:
        """Return generator that yields all stored files."""
        return self.fs.walk.files(exclude=[".*"])

    def count(self) -> int:
        """Return count of the number of stored files."""
        return sum(1 for _ in self.files())

    def size(self) -> int:
        """Return the total size in bytes of all stored files."""
        return sum(self.fs.getsize(path) for path in self.files())

    def __contains__(self, k: Key) -> bool:
        return self.exists(k)

    def __iter__(self) -> Iterable[str]:
        return self.files()

    def __len__(self) -> int:
        return self.count()

    async def _save(self, data: bytes, name: str, hashid: str,
                    file_path: str, id: Optional[FileId],
                    extra: Dict[str, Any]) -> StoredFile:
        existing = await self.store.get_file_by_hash(hashid, path=file_path)
        is_novel = existing is None
        address = None

        if is_novel:
            extension = resolve_extension(name, data)
            self.logger.info("Saving file %s%s", hashid, extension)
            address = await asyncio.to_thread(self._copy, data, hashid,
                                              extension)
            if address.is_duplicate:
                self.logger.info("Reusing unrecorded file %s", address.relpath)
            size = len(data)
            type = category_for(extension)
        else:
            self.logger.info("File already uploaded: %s", hashid)
            extension = existing.extension
            size = existing.size
            type = existing.type

        if (not is_novel and existing.path == file_path
                and not self.allow_duplicates):
            self.logger.warning("File %s already exists at %s", hashid,
                                file_path)
            existing.url = self.id_to_url(existing.id)
            return existing

        record = StoredFile(
            id=id if id not in (None, "") else self.store.uid(),
            name=name,
            extension=extension,
            hash=hashid,
            size=size,
            type=type,
            last_modified=int(time.time() * 1000),
            path=file_path,
            extra=extra,
        )

        try:
            created = await self.store.create_file(record)
        except Exception as err:
            self.logger.error("Could not create record %s for %s", record.id,
                              hashid, exc_info=True)
            if is_novel:
                await self._rollback(address)
            raise PersistenceError(
                "Could not create record {0} for {1}: {2}".format(
                    record.id, hashid, err)) from err

        created.url = self.id_to_url(created.id)
        return created

    async def _rollback(self, address: HashAddress) -> None:
        """Remove a file written for a record that couldn't be created."""
        try:
            if await asyncio.to_thread(self.fs.isfile, address.relpath):
                await asyncio.to_thread(self._delete, address.relpath)
                self.logger.info(
                    "Cleaning up orphaned file after database error: %s",
                    address.relpath)
        except Exception:
            self.logger.error("Could not remove orphaned file %s",
                              address.relpath, exc_info=True)

    async def _lookup(self, id: FileId) -> Optional[StoredFile]:
        try:
            record = await self.store.get_file_by_id(id)
        except Exception:
            self.logger.error("Could not look up file %s", id, exc_info=True)
            return None

        if record is None:
            self.logger.info("File %s not found", id)
        return record

    def _computehash(self, data: bytes) -> str:
        """Compute hash of file using :attr:`algorithm`."""
        return u.computehash(data, self.algorithm)

    def _copy(self, data: bytes, hashid: str,
              extension: Optional[str] = None) -> HashAddress:
        """Write `data` at the content address of `hashid` unless a file is
        already there. The content goes to a temporary sibling first and is
        then moved into place.
        """
        path = self._hashid_to_path(hashid, extension)

        if self.fs.isfile(path):
            is_duplicate = True

        else:
            is_duplicate = False
            dirname = pyfs.path.dirname(path)
            self._makedirs(dirname)
            tmp = pyfs.path.join(dirname, ".{0}.part".format(uuid.uuid4().hex))
            try:
                self.fs.writebytes(tmp, u.to_bytes(data))
                self.fs.move(tmp, path, overwrite=True)
            finally:
                if self.fs.exists(tmp):
                    self.fs.remove(tmp)

        return HashAddress(hashid, path, is_duplicate)

    def _delete(self, path: str) -> None:
        """Delete file at `path` and remove any folders it leaves empty."""
        self.fs.remove(path)
        self._remove_empty(pyfs.path.dirname(path))

    def _remove_empty(self, path: str) -> None:
        """Successively remove all empty folders starting with `path` and
        proceeding "up" through directory tree until reaching the root.
        """
        try:
            remove_empty(self.fs, path)
        except ResourceNotFound:
            # Guard against paths that don't exist in the FS.
            return None

    def _makedirs(self, dir_path: str) -> None:
        """Physically create the folder path on disk."""
        if dir_path in ("", "/"):
            return
        perms = Permissions.create(self.dmode)
        self.fs.makedirs(dir_path, permissions=perms, recreate=True)

    def _syspath(self, path: str) -> str:
        if self.fs.hassyspath(path):
            return self.fs.getsyspath(path)
        return path

    def _fs_path(self, k: Key) -> Optional[str]:
        """Attempt to determine the real path of a hash or path through
        successive checking of candidate paths. A file stored with an
        extension matches when its name is the hash followed by a dot.
        """
        if isinstance(k, HashAddress):
            k = k.relpath

        if not k:
            return None

        # Check if input was a fs path already.
        if self.fs.isfile(k):
            return k

        # Check if input was a hash.
        filepath = self._hashid_to_path(k)
        if self.fs.isfile(filepath):
            return filepath

        dirname, basename = pyfs.path.split(filepath)
        try:
            matches = self.fs.filterdir(dirname or "/",
                                        files=["{0}.*".format(basename)],
                                        exclude_dirs=["*"])
            for info in matches:
                return pyfs.path.join(dirname, info.name)
        except ResourceNotFound:
            return None

        # Could not determine a match.
        return None

    def _hashid_to_path(self, hashid: str, extension: str = "") -> str:
        """Build the relative file path for a given hash id. Optionally, append
        a file extension.
        """
        paths = self._shard(hashid)

        if extension and not extension.startswith("."):
            extension = "." + extension
        elif not extension:
            extension = ""

        return pyfs.path.join(*paths) + extension

    def _shard(self, hashid: str):
        """Shard content ID into subfolders."""
        return u.shard(hashid, self.depth, self.width)
