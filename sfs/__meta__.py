# -*- coding: utf-8 -*-
"""Define project metadata
"""

__title__ = "sfs"
__summary__ = "A content-addressable file storage layer with pluggable metadata."

__version__ = "0.1.0"

__install_requires__ = [
    "fs>=2.4.16",
    "setuptools<81",
    "python-magic>=0.4.27",
    "pydantic>=2.0",
    "pydantic-settings>=2.0",
]
__tests_require__ = ["pytest", "pytest-asyncio>=0.23"]

__author__ = "SFS Contributors"

__license__ = "MIT License"
