# amppkg/inputs/config.py
"""
Configuration loader for the packager.

Goals
-----
- File-first settings validated with Pydantic.
- Sensible defaults when no file exists, so the URL tools work out of the box.
- Minimal environment-variable overrides for CI/CLI convenience.

JSON shape
----------
    {
      "cache_host": "cdn.ampproject.org",
      "user_agent": "amppkg/0.1",
      "timeout_s": 15.0,
      "allow_network": true,
      "allowed_formats": ["AMP", "AMP4ADS"]
    }

Environment overrides (optional)
--------------------------------
- AMPPKG_CACHE_HOST     -> cache_host
- AMPPKG_USER_AGENT     -> user_agent
- AMPPKG_TIMEOUT_S      -> timeout_s (float; bad values ignored)
- AMPPKG_ALLOW_NETWORK  -> allow_network ("1"/"true"/"yes" vs "0"/"false"/"no")

Public API
----------
- class ConfigLoader:
    - load(path: str | Path | None) -> PackagerConfig
    - load_json(text: str) -> PackagerConfig
    - with_overrides(cfg, **kwargs) -> PackagerConfig (non-destructive copies)
- function load_config(path: str | Path | None) -> PackagerConfig  (convenience)
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from amppkg.core.errors import ConfigError
from amppkg.core.urls.cache_url import AMP_CACHE_HOST
from amppkg.schemas.models import HtmlFormat

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


class PackagerConfig(BaseModel):
    """Settings shared by the CLI, the fetcher and the transform pipeline."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    cache_host: str = Field(AMP_CACHE_HOST, min_length=1, description="Parent domain of the per-origin cache subdomains.")
    user_agent: str = Field("amppkg/0.1 (+cache-url-rewriter)", description="User-Agent used when fetching documents.")
    timeout_s: float = Field(15.0, gt=0, description="HTTP timeout in seconds for document fetches.")
    allow_network: bool = Field(True, description="If False, documents may only be read from local files.")
    allowed_formats: list[HtmlFormat] = Field(
        default_factory=list,
        description="AMP formats to transform; empty means every non-experimental format.",
    )

    @field_validator("cache_host")
    @classmethod
    def _strip_host(cls, v: str) -> str:
        host = v.strip().strip(".").lower()
        if not host or "/" in host or ":" in host:
            raise ValueError(f"cache_host must be a bare domain name, got {v!r}")
        return host

    @field_validator("allowed_formats", mode="before")
    @classmethod
    def _formats_by_name(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        out: list[Any] = []
        for item in v:
            if isinstance(item, str):
                try:
                    item = HtmlFormat[item.strip().upper()]
                except KeyError as e:
                    raise ValueError(f"unknown format name: {item!r}") from e
            out.append(item)
        return out


@dataclass(frozen=True)
class ConfigLoader:
    """
    File-first config loader with light env overrides.

    Default search (when path=None):
        1) ./amppkg.json
        2) ./config.json
        3) built-in defaults
    """

    env_prefix: str = "AMPPKG_"

    # ---------- Public API ----------

    def load(self, path: str | Path | None = None) -> PackagerConfig:
        p = self._resolve_path(path)
        raw = self._read_json_file(p) if p is not None else {}
        cfg = self._parse_root(raw)
        return self._apply_env_overrides(cfg)

    def load_json(self, text: str) -> PackagerConfig:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON payload: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError("Config JSON root must be an object")
        cfg = self._parse_root(raw)
        return self._apply_env_overrides(cfg)

    def with_overrides(
        self,
        cfg: PackagerConfig,
        *,
        cache_host: str | None = None,
        user_agent: str | None = None,
        timeout_s: float | None = None,
        allow_network: bool | None = None,
    ) -> PackagerConfig:
        """
        Return a *new* PackagerConfig with the non-null overrides applied (re-validated).
        """
        updates: dict[str, Any] = {}
        if cache_host is not None:
            updates["cache_host"] = cache_host
        if user_agent is not None:
            updates["user_agent"] = user_agent
        if timeout_s is not None:
            updates["timeout_s"] = timeout_s
        if allow_network is not None:
            updates["allow_network"] = allow_network

        if not updates:
            return cfg
        return self._parse_root({**cfg.model_dump(), **updates})

    # ---------- Internals ----------

    def _resolve_path(self, path: str | Path | None) -> Path | None:
        if path is not None:
            p = Path(path)
            if not p.exists():
                raise ConfigError(f"Config file not found: {p}")
            return p

        for candidate in (Path("amppkg.json"), Path("config.json")):
            if candidate.exists():
                return candidate
        return None

    def _read_json_file(self, p: Path) -> dict[str, Any]:
        if p.suffix.lower() != ".json":
            raise ConfigError(f"Unsupported config format for {p.name}; only .json is supported.")
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {p}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config root in {p} must be an object")
        return cast(dict[str, Any], data)

    def _parse_root(self, data: dict[str, Any]) -> PackagerConfig:
        try:
            return PackagerConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Config validation failed:\n{e}") from e

    def _apply_env_overrides(self, cfg: PackagerConfig) -> PackagerConfig:
        prefix = self.env_prefix
        updates: dict[str, Any] = {}

        host = os.getenv(f"{prefix}CACHE_HOST")
        if host:
            updates["cache_host"] = host

        ua = os.getenv(f"{prefix}USER_AGENT")
        if ua:
            updates["user_agent"] = ua

        timeout = os.getenv(f"{prefix}TIMEOUT_S")
        if timeout:
            try:
                updates["timeout_s"] = float(timeout)
            except ValueError:
                # Ignore bad value; keep validated cfg.timeout_s
                pass

        allow = os.getenv(f"{prefix}ALLOW_NETWORK")
        if allow:
            normalized = allow.strip().lower()
            if normalized in _TRUTHY:
                updates["allow_network"] = True
            elif normalized in _FALSY:
                updates["allow_network"] = False

        if not updates:
            return cfg
        return self._parse_root({**cfg.model_dump(), **updates})


# ----------------------------
# Convenience function
# ----------------------------


def load_config(path: str | Path | None = None) -> PackagerConfig:
    """Convenience wrapper for one-shot callers."""
    return ConfigLoader().load(path)
