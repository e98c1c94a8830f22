"""
Loading and validation of SEO Scout configuration.
Pydantic describes the schema; YAML and JSON files are accepted.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_USER_AGENT = "SEOScout-Audit-Bot/1.0"
TURNSTILE_VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class CrawlerOptions(BaseModel):
    """Immutable limits for one crawl run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_depth: int = Field(2, gt=0, description="Deepest link level followed from the start URL.")
    max_pages: int = Field(50, gt=0, description="Hard cap on audited pages.")
    concurrency: int = Field(3, gt=0, description="Fetches allowed in flight at once.")
    per_page_timeout_ms: int = Field(15000, gt=0, description="Whole-request timeout per page.")
    max_html_bytes: int = Field(5 * 1024 * 1024, gt=0, description="Body size cap per page.")
    crawl_timeout_s: float = Field(60.0, gt=0, description="Wall-clock ceiling for scheduling.")


class AuditConfig(BaseModel):
    """Service-level configuration: crawl limits plus verification and throttling."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    crawler: CrawlerOptions = Field(default_factory=CrawlerOptions)
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1)
    max_concurrent_audits: int = Field(
        default_factory=lambda: _env_int("MAX_CONCURRENT_AUDITS", 2), gt=0
    )
    turnstile_secret: Optional[str] = Field(
        default_factory=lambda: os.environ.get("TURNSTILE_SECRET_KEY") or None
    )
    turnstile_verify_url: str = TURNSTILE_VERIFY_URL
    verify_timeout_s: float = Field(3.0, gt=0)
    production: bool = Field(
        default_factory=lambda: os.environ.get("SEO_SCOUT_ENV", "").lower() == "production"
    )
    default_lang: Literal["en", "tr"] = "en"

    @field_validator("turnstile_secret", mode="before")
    def _blank_secret_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> AuditConfig:
    """
    Read YAML or JSON and return a validated AuditConfig.

    With *path* ``None`` the default ``configs/default.yaml`` is used when present,
    otherwise built-in defaults. An explicit path that does not exist raises
    FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return AuditConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return AuditConfig(**data)


__all__ = ["CrawlerOptions", "AuditConfig", "load_config", "DEFAULT_USER_AGENT"]
