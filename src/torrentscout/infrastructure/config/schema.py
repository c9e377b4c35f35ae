"""Validated configuration models.

``AppConfig`` is flat in Python but accepts the sectioned YAML layout
(``http.timeout_seconds`` ...) through validation aliases.  The mapping
between the two shapes lives in ``SECTIONED_FIELDS`` and is shared with
the loader.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from torrentscout.domain.entities import Category, TorznabConfig
from torrentscout.infrastructure.sources.constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_USER_AGENT,
)

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]

# Flat field name -> (YAML section, key inside the section)
SECTIONED_FIELDS: dict[str, tuple[str, str]] = {
    "http_timeout_seconds": ("http", "timeout_seconds"),
    "http_connect_timeout_seconds": ("http", "connect_timeout_seconds"),
    "http_follow_redirects": ("http", "follow_redirects"),
    "http_user_agent": ("http", "user_agent"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
    "enabled_sources": ("search", "enabled_sources"),
    "max_results": ("search", "max_results"),
    "torznab_indexers": ("torznab", "indexers"),
}

SECTIONS: frozenset[str] = frozenset(s for s, _ in SECTIONED_FIELDS.values())


def _from(name: str) -> AliasChoices:
    section, key = SECTIONED_FIELDS[name]
    return AliasChoices(name, AliasPath(section, key))


def _split_ids(value: Any) -> Any:
    """``"nyaasi, yts"`` -> ``["nyaasi", "yts"]``; lists pass through."""
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


class TorznabIndexerConfig(BaseModel):
    """One entry of ``torznab.indexers``."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    url: str = Field(min_length=1, description="Base URL or full /api URL.")
    api_key: str = ""
    category: Category = Category.ALL
    unsafe_reason: Optional[str] = Field(
        default=None,
        description="Marks the indexer unsafe; shown next to it in source listings.",
    )

    @field_validator("category", mode="before")
    @classmethod
    def _category_by_name(cls, v: Any) -> Any:
        return Category.from_name(v) if isinstance(v, str) else v

    @field_validator("url")
    @classmethod
    def _http_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("indexer url must start with http:// or https://")
        return v

    def to_domain(self) -> TorznabConfig:
        return TorznabConfig(**self.model_dump())


class AppConfig(BaseModel):
    """Final, validated configuration (defaults < YAML < env < CLI)."""

    app_name: str = "torrentscout"
    environment: Environment = Field(
        default="dev",
        description="Runtime environment; prod switches the default log format to json.",
    )

    http_timeout_seconds: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT, validation_alias=_from("http_timeout_seconds")
    )
    http_connect_timeout_seconds: float = Field(
        default=DEFAULT_CONNECT_TIMEOUT,
        validation_alias=_from("http_connect_timeout_seconds"),
    )
    http_follow_redirects: bool = Field(
        default=True, validation_alias=_from("http_follow_redirects")
    )
    http_user_agent: str = Field(
        default=DEFAULT_USER_AGENT, validation_alias=_from("http_user_agent")
    )

    log_level: LogLevel = Field(default="INFO", validation_alias=_from("log_level"))
    log_format: Optional[LogFormat] = Field(
        default=None, validation_alias=_from("log_format")
    )

    enabled_sources: Optional[list[str]] = Field(
        default=None,
        validation_alias=_from("enabled_sources"),
        description="Source ids to search; unset means each source's own default.",
    )
    max_results: Optional[int] = Field(
        default=None,
        validation_alias=_from("max_results"),
        description="A search stops once this many records were collected.",
    )

    torznab_indexers: list[TorznabIndexerConfig] = Field(
        default_factory=list, validation_alias=_from("torznab_indexers")
    )

    @field_validator("enabled_sources", mode="before")
    @classmethod
    def _ids_from_text(cls, v: Any) -> Any:
        return _split_ids(v)

    @field_validator("http_timeout_seconds", "http_connect_timeout_seconds")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("HTTP timeouts must be > 0")
        return v

    @field_validator("max_results")
    @classmethod
    def _positive_limit(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("max_results must be >= 1")
        return v

    @field_validator("torznab_indexers")
    @classmethod
    def _unique_indexer_ids(
        cls, v: list[TorznabIndexerConfig]
    ) -> list[TorznabIndexerConfig]:
        ids = [indexer.id for indexer in v]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"duplicate torznab indexer id: {duplicates[0]!r}")
        return v

    @model_validator(mode="after")
    def _default_log_format(self) -> "AppConfig":
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def torznab_configs(self) -> list[TorznabConfig]:
        return [indexer.to_domain() for indexer in self.torznab_indexers]

    def to_sectioned_dict(self) -> dict[str, Any]:
        """Dump in the YAML layout ``load_config`` reads."""
        flat = self.model_dump(mode="json")
        out: dict[str, Any] = {
            "app_name": flat["app_name"],
            "environment": flat["environment"],
        }
        for name, (section, key) in SECTIONED_FIELDS.items():
            out.setdefault(section, {})[key] = flat[name]
        return out


class EnvOverrides(BaseSettings):
    """``TORRENTSCOUT_*`` environment variables, all optional.

    Read separately from ``AppConfig`` so the loader can merge them at the
    right precedence.  Indexers are YAML-only.
    """

    model_config = SettingsConfigDict(
        env_prefix="TORRENTSCOUT_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_connect_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    # Comma-separated; a list type would make pydantic-settings expect JSON.
    enabled_sources: Optional[str] = None
    max_results: Optional[int] = None

    def to_update_dict(self) -> dict[str, Any]:
        """Only the variables that are actually set."""
        data = self.model_dump(exclude_none=True)
        if "enabled_sources" in data:
            data["enabled_sources"] = _split_ids(data["enabled_sources"])
        return data
