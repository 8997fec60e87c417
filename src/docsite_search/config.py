"""Configuration for documentation search, built on pydantic-settings."""

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class IndexSettings(BaseModel):
    """Cache policy for built indexes."""

    enabled: bool = Field(default=True, description="Cache built indexes between searches")
    ttl: int = Field(default=86400, ge=1, description="Seconds a cached index stays fresh")


class CacheSettings(BaseModel):
    """Cache key namespacing and backend location."""

    key: str = Field(default="%s.%s", description="Key format applied to (kind, version)")
    path: Path | None = Field(
        default=None,
        description="SQLite file for a persistent cache (in-memory when unset)",
    )

    @field_validator("key")
    @classmethod
    def _check_key_format(cls, value: str) -> str:
        try:
            value % ("search-index", "version")
        except (TypeError, ValueError) as exc:
            msg = f"Cache key format must accept two string arguments: {value!r}"
            raise ValueError(msg) from exc
        return value


class VersionSettings(BaseModel):
    """Documentation versions available for indexing and search."""

    available: dict[str, str] = Field(
        default_factory=lambda: {"1.0": "1.0"},
        description="Version id to label, in display order",
    )
    latest: str = Field(default="1.0", description="Version used when none is requested")

    @model_validator(mode="after")
    def _check_latest(self) -> "VersionSettings":
        if self.latest not in self.available:
            msg = f"Latest version {self.latest!r} is not among the available versions"
            raise ValueError(msg)
        return self


class Settings(BaseSettings):
    """Documentation search settings.

    Precedence: explicit keyword arguments > environment variable > defaults.
    Nested options are read from ``DOCSEARCH_INDEX__TTL`` style variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCSEARCH_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    min_length: int = Field(default=3, ge=1, description="Minimum trimmed query length")
    default_size: int = Field(default=10, ge=1, description="Results per page when no size is requested")
    max_size: int = Field(default=100, ge=1, description="Upper bound for a requested page size")
    max_results: int = Field(default=1000, ge=1, description="Maximum ranked results kept per search")
    snippet_length: int = Field(default=150, ge=0, description="Characters of context on each side of a match")
    metadata_fields: list[str] = Field(
        default_factory=lambda: ["description", "tags"],
        description="Front-matter keys folded into the metadata field, in order",
    )

    docs_path: Path | None = Field(default=None, description="Root directory of the documentation pages")
    route_prefix: str = Field(default="/", description="URL prefix for page routes")

    index: IndexSettings = Field(default_factory=IndexSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    versions: VersionSettings = Field(default_factory=VersionSettings)

    @classmethod
    def from_toml(cls, path: Path, **overrides: Any) -> "Settings":
        """Load settings from a TOML file.

        Args:
            path: Path to the TOML configuration file.
            **overrides: Values taking precedence over the file.

        Returns:
            Settings instance.
        """
        with path.open("rb") as handle:
            data = tomllib.load(handle)
        data.update(overrides)
        return cls(**data)

    def cache_key(self, version: str) -> str:
        """Return the cache key for the search index of a version.

        Args:
            version: Version identifier.

        Returns:
            Namespaced cache key.
        """
        return self.cache.key % ("search-index", version)
