# -*- coding: utf-8 -*-

import pytest

from sfs import extensions


@pytest.mark.parametrize(
    "name,expected",
    [
        ("report.pdf", ".pdf"),
        ("archive.tar.gz", ".gz"),
        ("dir/photo.JPG", ".JPG"),
        (".bashrc", ""),
        ("README", ""),
        ("trailing.", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_extension_from_name(name, expected):
    assert extensions.extension_from_name(name) == expected


def test_resolve_extension_prefers_name(monkeypatch):
    def fail(data):
        raise AssertionError("content should not be sniffed")

    monkeypatch.setattr(extensions, "sniff_mimetype", fail)

    assert extensions.resolve_extension("notes.txt", b"\x89PNG\r\n\x1a\n") == ".txt"


@pytest.mark.parametrize(
    "mimetype,expected",
    [
        ("image/png", ".png"),
        ("image/jpeg", ".jpg"),
        ("application/pdf", ".pdf"),
        ("application/zip", ".zip"),
        ("application/octet-stream", ""),
        ("application/x-unknown-thing", ""),
    ],
)
def test_resolve_extension_sniffs_content(monkeypatch, mimetype, expected):
    monkeypatch.setattr(extensions, "sniff_mimetype", lambda data: mimetype)

    assert extensions.resolve_extension("blob", b"some bytes") == expected


def test_sniff_extension_empty_content(monkeypatch):
    def fail(data):
        raise AssertionError("empty content should not be sniffed")

    monkeypatch.setattr(extensions, "sniff_mimetype", fail)

    assert extensions.sniff_extension(b"") == ""


def test_sniff_extension_libmagic():
    pytest.importorskip("magic")
    png = (b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
           b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89")

    assert extensions.sniff_extension(png) == ".png"


@pytest.mark.parametrize(
    "extension,expected",
    [
        (".png", "image"),
        ("PNG", "image"),
        (".mp4", "video"),
        (".mp3", "audio"),
        (".pdf", "document"),
        (".xlsx", "spreadsheet"),
        (".pptx", "presentation"),
        (".zip", "archive"),
        (".py", "code"),
        (".woff2", "font"),
        (".unknown", "other"),
        ("", "other"),
        (".", "other"),
        (None, "other"),
        (42, "other"),
    ],
)
def test_category_for(extension, expected):
    assert extensions.category_for(extension) == expected
