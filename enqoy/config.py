"""
enqoy.config — YAML Configuration Loader
=========================================

Reads ``config.yaml`` for deployment settings shared by the client library
and the pairing service (community identity, served city, debounce timings,
API location).  Secrets (``JWT_SECRET``, ``DATABASE_URL``) stay in ``.env``.

Usage::

    from enqoy.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.main_city)         # "Addis Ababa"
    print(cfg.api_url)           # ENQOY_API_URL wins over the YAML value
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_API_URL = "http://localhost:3000/api"


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class EnqoyConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    community_name: str = "Enqoy"
    main_city: str = "Addis Ababa"  # What the "main" answer to the city question resolves to

    # Client
    api_url: str = DEFAULT_API_URL
    storage_path: str | None = None  # None → in-memory persisted state
    autosave_debounce_ms: int = 2000
    search_debounce_ms: int = 500
    include_fun_facts_step: bool = True  # Optional trailing assessment step 23
    minimum_age: int = 18

    # Pairing service
    default_group_size: int = 6
    dashboard_port: int = 8000


def _api_url(raw: dict) -> str:
    """``ENQOY_API_URL`` overrides the YAML value."""
    env = os.getenv("ENQOY_API_URL", "").strip()
    if env:
        return env.rstrip("/")
    return str(raw.get("api_url") or DEFAULT_API_URL).rstrip("/")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> EnqoyConfig:
    """Read *path* and return an :class:`EnqoyConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return EnqoyConfig(
        community_name=raw["community_name"],
        main_city=raw["main_city"],
        api_url=_api_url(raw),
        storage_path=raw.get("storage_path") or None,
        autosave_debounce_ms=int(raw.get("autosave_debounce_ms", 2000)),
        search_debounce_ms=int(raw.get("search_debounce_ms", 500)),
        include_fun_facts_step=bool(raw.get("include_fun_facts_step", True)),
        minimum_age=int(raw.get("minimum_age", 18)),
        default_group_size=int(raw.get("default_group_size", 6)),
        dashboard_port=int(raw.get("dashboard_port", 8000)),
    )
