# -*- coding: utf-8 -*-
"""SFS is a content-addressable file storage layer. Uploaded files are saved
in a directory under their content hash, while their metadata is kept by a
store the application provides.

Typical use cases for this kind of system are ones where:

- Files are written once and never change (e.g. user uploads).
- Identical uploads should share one copy on disk.
- File metadata lives elsewhere (e.g. in a database) and files are served
  from a public URL derived from their id.
"""

import logging

from .__meta__ import (
    __title__,
    __summary__,
    __version__,
    __author__,
    __license__,
)

from .config import StorageSettings, get_settings
from .exceptions import NotFoundError, PersistenceError, StorageError, UpstreamError
from .extensions import category_for, resolve_extension
from .models import DiskUsage, HashAddress, ResolvedFile, StoredFile, Upload
from .storage import FileStorage
from .store import InMemoryMetadataStore, MetadataStore

logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = (
    "FileStorage",
    "MetadataStore",
    "InMemoryMetadataStore",
    "StoredFile",
    "Upload",
    "HashAddress",
    "ResolvedFile",
    "DiskUsage",
    "StorageSettings",
    "get_settings",
    "StorageError",
    "NotFoundError",
    "PersistenceError",
    "UpstreamError",
    "category_for",
    "resolve_extension",
)
