# === NAVMAP v1 ===
# {
#   "module": "DocsXRef.XRefMaps.settings",
#   "purpose": "Typed downloader settings, environment overrides, and YAML config loading",
#   "sections": [
#     {"id": "loggingsettings", "name": "LoggingSettings", "anchor": "class-loggingsettings", "kind": "class"},
#     {"id": "downloadersettings", "name": "DownloaderSettings", "anchor": "class-downloadersettings", "kind": "class"},
#     {"id": "environmentoverrides", "name": "EnvironmentOverrides", "anchor": "class-environmentoverrides", "kind": "class"},
#     {"id": "build-settings", "name": "build_settings", "anchor": "function-build-settings", "kind": "function"},
#     {"id": "load-settings", "name": "load_settings", "anchor": "function-load-settings", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Configuration for xref map acquisition.

Settings are plain frozen pydantic models so a single instance can be shared
by every worker thread. Environment variables prefixed ``DOCSXREF_`` override
file or constructor values; the most important one,
``DOCSXREF_NO_CHECK_CERTIFICATE_REVOCATION_LIST``, lets locked-down build
agents without CRL access still download remote maps.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

DEFAULT_MAX_PARALLELISM = 16
DEFAULT_TIMEOUT_SEC = 30 * 60.0
DEFAULT_READ_BUFFER_SIZE = 81920
DEFAULT_USER_AGENT = "DocsXRef-XRefMaps/0.1"
CONFIG_SECTION = "xrefmaps"


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    emit_json_logs: bool = Field(default=False, description="Also write JSON lines to log_dir")
    log_dir: Optional[Path] = Field(default=None, description="Directory for JSON log files")
    max_log_size_mb: float = Field(default=5.0, gt=0.0)

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Normalize and validate logging level."""
        upper = str(v).upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if upper not in valid_levels:
            raise ValueError(f"level must be one of {sorted(valid_levels)}, got '{v}'")
        return upper

    def level_int(self) -> int:
        return getattr(logging, self.level)


class DownloaderSettings(BaseModel):
    """Settings consumed by :class:`~DocsXRef.XRefMaps.downloader.XRefMapDownloader`."""

    model_config = ConfigDict(frozen=True)

    base_folder: Optional[Path] = Field(
        default=None,
        description="Primary search directory, resolved against the working directory",
    )
    fallback_folders: List[Path] = Field(
        default_factory=list,
        description="Directories searched, in order, after base_folder",
    )
    max_parallelism: int = Field(default=DEFAULT_MAX_PARALLELISM, ge=1, le=1024)
    timeout_sec: float = Field(
        default=DEFAULT_TIMEOUT_SEC,
        gt=0.0,
        description="Whole-request timeout for remote maps (large maps on slow links)",
    )
    read_buffer_size: int = Field(default=DEFAULT_READ_BUFFER_SIZE, ge=1024)
    check_certificate_revocation: bool = Field(
        default=True,
        description="Verify peer certificates against CRLs loaded from crl_file",
    )
    crl_file: Optional[Path] = Field(default=None, description="PEM bundle of revocation lists")
    follow_redirects: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("fallback_folders", mode="before")
    @classmethod
    def coerce_fallback_folders(cls, v: Any) -> Any:
        """Accept a comma-separated string as well as a list."""
        if v is None:
            return []
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


class EnvironmentOverrides(BaseSettings):
    """Pydantic settings model exposing environment-derived overrides."""

    no_check_certificate_revocation_list: Optional[bool] = Field(
        default=None, alias="DOCSXREF_NO_CHECK_CERTIFICATE_REVOCATION_LIST"
    )
    max_parallelism: Optional[int] = Field(default=None, alias="DOCSXREF_MAX_PARALLELISM")
    timeout_sec: Optional[float] = Field(default=None, alias="DOCSXREF_TIMEOUT_SEC")
    log_level: Optional[str] = Field(default=None, alias="DOCSXREF_LOG_LEVEL")

    model_config = SettingsConfigDict(env_prefix="DOCSXREF_", case_sensitive=False, extra="ignore")


def apply_env_overrides(settings: DownloaderSettings) -> DownloaderSettings:
    """Return ``settings`` with any ``DOCSXREF_*`` environment overrides applied."""

    try:
        env = EnvironmentOverrides()
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Invalid DOCSXREF_* environment variable: {exc}") from exc
    logger = logging.getLogger("DocsXRef.XRefMaps")
    updates: Dict[str, Any] = {}
    if env.no_check_certificate_revocation_list:
        updates["check_certificate_revocation"] = False
    if env.max_parallelism is not None:
        updates["max_parallelism"] = env.max_parallelism
    if env.timeout_sec is not None:
        updates["timeout_sec"] = env.timeout_sec
    if env.log_level is not None:
        updates["logging"] = {**settings.logging.model_dump(), "level": env.log_level}
    if not updates:
        return settings
    logger.debug("settings-env-overrides", extra={"keys": sorted(updates)})
    try:
        return DownloaderSettings.model_validate({**settings.model_dump(), **updates})
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Invalid DOCSXREF_* environment override: {exc}") from exc


def build_settings(raw: Optional[Mapping[str, Any]] = None, *, apply_env: bool = True) -> DownloaderSettings:
    """Validate ``raw`` into :class:`DownloaderSettings` and apply env overrides.

    ``raw`` may be the settings mapping itself or a whole config document
    carrying an ``xrefmaps:`` section.
    """

    data: Mapping[str, Any] = raw or {}
    if CONFIG_SECTION in data:
        section = data[CONFIG_SECTION]
        if section is None:
            section = {}
        if not isinstance(section, Mapping):
            raise ConfigurationError(f"'{CONFIG_SECTION}' section must be a mapping")
        data = section
    try:
        settings = DownloaderSettings.model_validate(dict(data))
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Invalid xref map downloader settings: {exc}") from exc
    if apply_env:
        settings = apply_env_overrides(settings)
    return settings


def load_settings(config_path: Union[str, Path], *, apply_env: bool = True) -> DownloaderSettings:
    """Read a YAML config file and return validated settings."""

    path = Path(config_path).expanduser()
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in configuration file {path}: {exc}") from exc
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")
    return build_settings(raw, apply_env=apply_env)


__all__ = [
    "DEFAULT_MAX_PARALLELISM",
    "DEFAULT_TIMEOUT_SEC",
    "DEFAULT_READ_BUFFER_SIZE",
    "LoggingSettings",
    "DownloaderSettings",
    "EnvironmentOverrides",
    "apply_env_overrides",
    "build_settings",
    "load_settings",
]
