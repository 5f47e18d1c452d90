"""Derive file extensions from names or content, and map them to coarse file
type categories.
"""

import logging
import mimetypes

import fs as pyfs

logger = logging.getLogger(__name__)

#: Category of extensions missing from :data:`CATEGORIES`.
DEFAULT_CATEGORY = "other"

CATEGORIES = {
    "image": (
        "apng", "avif", "bmp", "gif", "heic", "heif", "ico", "jfif", "jpeg",
        "jpg", "png", "psd", "raw", "svg", "tif", "tiff", "webp",
    ),
    "video": (
        "3gp", "avi", "flv", "m4v", "mkv", "mov", "mp4", "mpeg", "mpg", "ogv",
        "webm", "wmv",
    ),
    "audio": (
        "aac", "aiff", "amr", "flac", "m4a", "mid", "midi", "mp3", "oga",
        "ogg", "opus", "wav", "weba", "wma",
    ),
    "document": (
        "doc", "docx", "epub", "md", "odt", "pages", "pdf", "rtf", "tex",
        "txt",
    ),
    "spreadsheet": ("csv", "numbers", "ods", "tsv", "xls", "xlsm", "xlsx"),
    "presentation": ("key", "odp", "ppt", "pptx"),
    "archive": (
        "7z", "bz2", "gz", "iso", "rar", "tar", "tgz", "xz", "zip", "zst",
    ),
    "code": (
        "c", "cpp", "cs", "css", "go", "h", "htm", "html", "java", "js",
        "json", "jsx", "php", "py", "rb", "rs", "sh", "sql", "ts", "tsx",
        "xml", "yaml", "yml",
    ),
    "font": ("eot", "otf", "ttf", "woff", "woff2"),
}

_CATEGORY_BY_EXTENSION = {
    ext: category for category, exts in CATEGORIES.items() for ext in exts
}

# mimetypes.guess_extension picks oddities like ".jpe" for some types.
_PREFERRED_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/tiff": ".tif",
    "image/svg+xml": ".svg",
    "audio/mpeg": ".mp3",
    "audio/ogg": ".ogg",
    "video/mp4": ".mp4",
    "video/quicktime": ".mov",
    "application/zip": ".zip",
    "application/gzip": ".gz",
    "application/x-gzip": ".gz",
    "application/x-bzip2": ".bz2",
    "application/x-7z-compressed": ".7z",
    "application/x-tar": ".tar",
    "application/pdf": ".pdf",
    "text/plain": ".txt",
}

_GENERIC_MIMETYPES = ("application/octet-stream", "inode/x-empty")

#: Number of leading bytes handed to libmagic.
SNIFF_BYTES = 8192


def extension_from_name(name: str) -> str:
    """Return the last dot-suffix of `name` including the dot, or ``""``.

    Dotfiles such as ``.bashrc`` and names ending with a bare dot have no
    extension.
    """
    extension = pyfs.path.splitext(name or "")[1]
    return extension if extension != "." else ""


def sniff_mimetype(data: bytes) -> str:
    import magic

    return magic.from_buffer(bytes(data[:SNIFF_BYTES]), mime=True)


def sniff_extension(data: bytes) -> str:
    """Detect an extension from the magic signature of `data`. Return ``""``
    when the content isn't recognized.
    """
    if not data:
        return ""

    mimetype = sniff_mimetype(data)
    if not mimetype or mimetype in _GENERIC_MIMETYPES:
        return ""

    extension = _PREFERRED_EXTENSIONS.get(mimetype)
    if extension is None:
        extension = mimetypes.guess_extension(mimetype) or ""

    logger.debug("Sniffed %s (%s) from content", mimetype, extension or "-")
    return extension


def resolve_extension(name: str, data: bytes) -> str:
    """Return the extension declared by `name`, else the one sniffed from
    `data`, else ``""``.
    """
    return extension_from_name(name) or sniff_extension(data)


def category_for(extension) -> str:
    """Map `extension` (with or without leading dot, any case) to a coarse
    category. Unknown input maps to :data:`DEFAULT_CATEGORY`.
    """
    if not isinstance(extension, str):
        return DEFAULT_CATEGORY
    key = extension.lstrip(".").lower()
    return _CATEGORY_BY_EXTENSION.get(key, DEFAULT_CATEGORY)
