"""Environment-based configuration for the pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .exceptions import ConfigError
from .pmc_client import DEFAULT_EUTILS_BASE_URL


@dataclass(frozen=True)
class Settings:
    openai_api_key: str
    openai_base_url: str
    openai_model: str
    openai_timeout_sec: int
    openai_temperature: float

    pmc_base_url: str
    pmc_timeout_sec: int
    pmc_api_key: str | None
    pmc_search_max_results: int

    network_trust_env: bool

    def __repr__(self) -> str:
        return (
            f"Settings(openai_base_url={self.openai_base_url!r}, "
            f"openai_model={self.openai_model!r}, pmc_base_url={self.pmc_base_url!r})"
        )


_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _read_env(*keys: str, default: str | None = None) -> str | None:
    for key in keys:
        value = os.getenv(key)
        if value is not None and value != "":
            return value
    return default


def _read_bool(*keys: str, default: bool) -> bool:
    raw = _read_env(*keys)
    if raw is None:
        return default
    return raw.strip().lower() not in _FALSE_VALUES


def _read_int(*keys: str, default: int) -> int:
    raw = _read_env(*keys)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid integer for {keys[0]}: {raw}") from exc


def _read_float(*keys: str, default: float) -> float:
    raw = _read_env(*keys)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid float for {keys[0]}: {raw}") from exc


def load_settings(dotenv_path: str | Path | None = None) -> Settings:
    """Load project settings from .env and OS env vars."""

    load_dotenv(dotenv_path=dotenv_path, override=False)

    openai_api_key = _read_env("OPENAI_API_KEY", "API_KEY")
    if not openai_api_key:
        raise ConfigError("Server misconfiguration: missing OPENAI_API_KEY")

    return Settings(
        openai_api_key=openai_api_key,
        openai_base_url=(
            _read_env(
                "OPENAI_BASE_URL", "BASE_URL", default="https://api.openai.com/v1"
            )
            or "https://api.openai.com/v1"
        ).rstrip("/"),
        openai_model=_read_env("OPENAI_MODEL", default="gpt-4.1-mini")
        or "gpt-4.1-mini",
        openai_timeout_sec=_read_int("OPENAI_TIMEOUT_SEC", default=120),
        openai_temperature=_read_float("OPENAI_TEMPERATURE", default=0.2),
        pmc_base_url=(
            _read_env("PMC_BASE_URL", default=DEFAULT_EUTILS_BASE_URL)
            or DEFAULT_EUTILS_BASE_URL
        ).rstrip("/"),
        pmc_timeout_sec=_read_int("PMC_TIMEOUT_SEC", default=30),
        pmc_api_key=_read_env("NCBI_API_KEY", "PMC_API_KEY"),
        pmc_search_max_results=_read_int("PMC_SEARCH_MAX_RESULTS", default=10),
        network_trust_env=_read_bool("NETWORK_TRUST_ENV", default=False),
    )
