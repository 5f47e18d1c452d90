"""Environment driven settings for :class:`sfs.FileStorage`."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils import check_algorithm


class StorageSettings(BaseSettings):
    """Scalar storage options, read from ``SFS_*`` variables or a ``.env``
    file.
    """

    model_config = SettingsConfigDict(
        env_prefix="SFS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    root: str = Field("./files", description="Directory or FS URL of the storage root")
    mask: str = Field("/files", description="URL prefix the file id is appended to")
    depth: int = Field(0, ge=0)
    width: int = Field(2, ge=1)
    algorithm: str = "sha256"
    dmode: int = 0o755
    allow_duplicates: bool = False

    @field_validator("algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        return check_algorithm(v)


_cached_settings: Optional[StorageSettings] = None


def get_settings() -> StorageSettings:
    """Return the settings singleton, created on first use so that importing
    the package never reads the environment.
    """
    global _cached_settings
    if _cached_settings is None:
        _cached_settings = StorageSettings()
    return _cached_settings


def reset_settings() -> None:
    global _cached_settings
    _cached_settings = None
