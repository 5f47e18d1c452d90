# -*- coding: utf-8 -*-


"""
common utils for sfs
"""


import asyncio
import hashlib
import string
from contextlib import asynccontextmanager
from typing import Dict, Iterable, List, Union

import fs as pyfs
from fs.base import FS

#: Minimum digest size, in bytes, accepted for content addressing.
MIN_DIGEST_SIZE = 32


def compact(items):
    """Return only truthy elements of `items`."""
    return [item for item in items if item]


def to_bytes(text) -> bytes:
    if isinstance(text, (bytearray, memoryview)):
        return bytes(text)
    if not isinstance(text, bytes):
        text = bytes(text, "utf8")
    return text


def computehash(content: Union[bytes, str, Iterable[bytes]],
                algorithm: str = "sha256") -> str:
    """Return the hex digest of `content`, which may be bytes, text or an
    iterable of chunks.
    """
    hash = hashlib.new(algorithm)
    if isinstance(content, (bytes, bytearray, memoryview, str)):
        content = [content]
    for data in content:
        hash.update(to_bytes(data))
    return hash.hexdigest()


def check_algorithm(algorithm: str) -> str:
    """Return `algorithm` if it is known to ``hashlib`` and wide enough to
    address content, else raise ``ValueError``.
    """
    try:
        digest_size = hashlib.new(algorithm).digest_size
    except (ValueError, TypeError) as err:
        raise ValueError(
            "Unsupported hash algorithm: {0!r}".format(algorithm)) from err

    if digest_size < MIN_DIGEST_SIZE:
        raise ValueError(
            "Hash algorithm {0!r} produces {1}-bit digests, at least {2} bits "
            "are required".format(algorithm, digest_size * 8,
                                  MIN_DIGEST_SIZE * 8))
    return algorithm


def shard(digest, depth, width) -> List[str]:
    # This creates a list of `depth` number of tokens with width
    # `width` from the first part of the id plus the remainder.
    return compact(
        [digest[i * width : width * (i + 1)] for i in range(depth)]
        + [digest[depth * width :]]
    )


def load_fs(root: Union[FS, str]) -> FS:
    """Return `root` if it already is a filesystem, else open (and create) the
    directory or FS URL it names.
    """
    if isinstance(root, FS):
        return root
    return pyfs.open_fs(root, create=True)


def url_prefix(mask: str) -> str:
    """Return `mask` with exactly one trailing separator."""
    return mask if mask.endswith("/") else mask + "/"


def id_to_url(mask: str, id) -> str:
    return url_prefix(mask) + str(id)


def url_to_id(mask: str, url: str) -> str:
    """Strip the `mask` prefix from `url`. Urls that don't start with the
    prefix are returned unchanged.
    """
    prefix = url_prefix(mask)
    if url.startswith(prefix):
        return url[len(prefix):]
    return url


class HashLocks(object):
    """Registry of ``asyncio.Lock`` objects keyed by content hash.

    A lock lives only while some task holds it or waits on it.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def __contains__(self, key: str) -> bool:
        return key in self._locks

    @asynccontextmanager
    async def hold(self, key: str):
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]


def is_hexdigest(value) -> bool:
    """Return whether `value` is a non-empty string of hex digits."""
    if not isinstance(value, str) or not value:
        return False
    return all(char in string.hexdigits for char in value)
