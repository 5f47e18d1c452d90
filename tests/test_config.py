# -*- coding: utf-8 -*-

import pytest
from pydantic import ValidationError

from sfs import config


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch, tmpdir):
    monkeypatch.chdir(str(tmpdir))
    config.reset_settings()
    yield
    config.reset_settings()


def test_settings_defaults():
    settings = config.StorageSettings()

    assert settings.depth == 0
    assert settings.algorithm == "sha256"
    assert settings.allow_duplicates is False


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("SFS_ROOT", "/srv/files")
    monkeypatch.setenv("SFS_MASK", "https://cdn.x/files")
    monkeypatch.setenv("SFS_ALLOW_DUPLICATES", "true")
    monkeypatch.setenv("SFS_DEPTH", "2")

    settings = config.get_settings()

    assert settings.root == "/srv/files"
    assert settings.mask == "https://cdn.x/files"
    assert settings.allow_duplicates is True
    assert settings.depth == 2
    assert config.get_settings() is settings


def test_settings_from_env_file(tmpdir):
    tmpdir.join(".env").write("SFS_MASK=/media\n")

    assert config.StorageSettings().mask == "/media"


def test_settings_rejects_weak_algorithm(monkeypatch):
    monkeypatch.setenv("SFS_ALGORITHM", "md5")

    with pytest.raises(ValidationError):
        config.StorageSettings()
