"""
Settings loading and merging for buildwatch.

Settings come from up to four layers. Later layers win:

1. **Built-in defaults**
   - The public PaperMC API and the "paper" project, no tracked versions

2. **YAML file** (optional, e.g. buildwatch.yaml)
   - Checked into a deployment repo next to whatever schedules the polls

3. **Environment variables** (optionally seeded from a .env file)
   - BUILDWATCH_API_BASE, BUILDWATCH_PROJECT, BUILDWATCH_VERSIONS,
     BUILDWATCH_USER_AGENT, BUILDWATCH_TIMEOUT

4. **Explicit overrides** (CLI flags)

Merge Behavior
--------------
Layers are deep-merged with "last wins" semantics:
  - **Dicts**: Recursively merged (keys from overlay override base)
  - **Lists**: Completely replaced (NOT appended/extended)
  - **Scalars**: Overwritten

YAML Layout
-----------
    project: paper
    versions: ["1.16.5", "1.17.1"]
    api:
      base: https://papermc.io/api
      user_agent: "my-bot/1.0 (+https://example.com)"
      timeout: 15

Error Handling
--------------
- ConfigError: missing file, YAML parse error, empty or non-mapping file,
  invalid values (empty project, bad timeout, non-string versions)
- All errors are chained with "from err" for better debugging

Examples
--------
Defaults plus environment:

    >>> from buildwatch.config import load_settings
    >>> settings = load_settings(environ={"BUILDWATCH_VERSIONS": "1.16.5"})
    >>> settings.versions
    ('1.16.5',)

Build a client from settings:

    >>> from buildwatch.config import create_api
    >>> api = create_api(settings)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import math
import os
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv
import requests
import yaml

from buildwatch.api.client import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, DistributionApi
from buildwatch.exceptions import ConfigError
from buildwatch.logging import get_global_logger

DEFAULT_API_BASE = "https://papermc.io/api"
DEFAULT_PROJECT = "paper"

ENV_PREFIX = "BUILDWATCH_"

# -------------------------------
# Data types
# -------------------------------


@dataclass(frozen=True)
class Settings:
    """Resolved buildwatch settings.

    Attributes:
        api_base: API root URL.
        project: Project identifier.
        versions: Version labels to track, in configured order.
        user_agent: User-Agent sent with every request.
        timeout: Per-request timeout in seconds.
    """

    api_base: str = DEFAULT_API_BASE
    project: str = DEFAULT_PROJECT
    versions: tuple[str, ...] = ()
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = DEFAULT_TIMEOUT


def _default_layer() -> dict[str, Any]:
    return {
        "project": DEFAULT_PROJECT,
        "versions": [],
        "api": {
            "base": DEFAULT_API_BASE,
            "user_agent": DEFAULT_USER_AGENT,
            "timeout": DEFAULT_TIMEOUT,
        },
    }


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> dict[str, Any]:
    """Load a YAML settings file.

    Raises:
        ConfigError: When the file does not exist or cannot be read, is
            not valid YAML, is empty, or its top level is not a mapping.
    """
    if not p.exists():
        raise ConfigError(f"Settings file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as err:
        raise ConfigError(f"Could not read settings file: {p}: {err}") from err
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        raise ConfigError(f"YAML file is empty: {p}")
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML must be a mapping (dict): {p}")
    return data


# -------------------------------
# Merge logic
# -------------------------------


def _deep_merge_dicts(base: dict[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - list + list -> overlay REPLACES base (not concatenated)
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, Mapping):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            result[k] = v
    return result


# -------------------------------
# Environment layer
# -------------------------------


def _split_versions(raw: str) -> list[str]:
    return [v.strip() for v in raw.split(",") if v.strip()]


def _environment_layer(environ: Mapping[str, str]) -> dict[str, Any]:
    """Translate BUILDWATCH_* variables into a settings layer.

    Unset and empty variables are skipped so they never blank out a value
    from an earlier layer.
    """
    layer: dict[str, Any] = {}
    api: dict[str, Any] = {}

    project = environ.get(f"{ENV_PREFIX}PROJECT")
    if project:
        layer["project"] = project

    versions = environ.get(f"{ENV_PREFIX}VERSIONS")
    if versions:
        layer["versions"] = _split_versions(versions)

    # Environment variable name -> key under "api"
    for name, key in (
        ("API_BASE", "base"),
        ("USER_AGENT", "user_agent"),
        ("TIMEOUT", "timeout"),
    ):
        value = environ.get(f"{ENV_PREFIX}{name}")
        if value:
            api[key] = value

    if api:
        layer["api"] = api
    return layer


# -------------------------------
# Validation
# -------------------------------


def _to_settings(cfg: dict[str, Any]) -> Settings:
    """Validate a merged config dict and freeze it into Settings."""
    api = cfg.get("api") or {}
    if not isinstance(api, dict):
        raise ConfigError("'api' must be a mapping")

    project = cfg.get("project")
    if not isinstance(project, str) or not project.strip():
        raise ConfigError("'project' must be a non-empty string")

    versions = cfg.get("versions") or []
    if isinstance(versions, str):
        versions = _split_versions(versions)
    if not isinstance(versions, list) or not all(
        isinstance(v, str) and v.strip() for v in versions
    ):
        raise ConfigError("'versions' must be a list of non-empty strings")

    api_base = api.get("base")
    if not isinstance(api_base, str) or not api_base.strip():
        raise ConfigError("'api.base' must be a non-empty string")

    user_agent = api.get("user_agent")
    if not isinstance(user_agent, str) or not user_agent.strip():
        raise ConfigError("'api.user_agent' must be a non-empty string")

    raw_timeout = api.get("timeout")
    # YAML 'yes'/'no' load as bool, which float() would accept
    if isinstance(raw_timeout, bool):
        raise ConfigError(f"'api.timeout' must be a number, got {raw_timeout!r}")
    try:
        timeout = float(raw_timeout)
    except (TypeError, ValueError) as err:
        raise ConfigError(f"'api.timeout' must be a number, got {raw_timeout!r}") from err
    if not math.isfinite(timeout) or timeout <= 0:
        raise ConfigError(f"'api.timeout' must be positive and finite, got {timeout}")

    return Settings(
        api_base=api_base.strip(),
        project=project.strip(),
        versions=tuple(v.strip() for v in versions),
        user_agent=user_agent,
        timeout=timeout,
    )


# -------------------------------
# Public API
# -------------------------------


def load_settings(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
    use_dotenv: bool = True,
) -> Settings:
    """Load and merge settings from defaults, file, environment and overrides.

    Args:
        config_path: Optional YAML settings file.
        environ: Environment mapping to read BUILDWATCH_* variables from.
            Defaults to os.environ (after loading a .env file when
            use_dotenv is True).
        overrides: Final layer in the same nested layout as the YAML file,
            e.g. {"project": "velocity", "api": {"base": "..."}}.
        use_dotenv: Load a .env file into os.environ first. Ignored when
            an explicit environ mapping is given.

    Returns:
        Validated, frozen Settings.

    Raises:
        ConfigError: On unreadable files or invalid values.
    """
    logger = get_global_logger()

    merged = _default_layer()

    if config_path is not None:
        config_path = config_path.resolve()
        logger.verbose("CONFIG", f"Loading: {config_path}")
        merged = _deep_merge_dicts(merged, _load_yaml_file(config_path))

    if environ is None:
        if use_dotenv and load_dotenv(find_dotenv(usecwd=True)):
            logger.verbose("CONFIG", "Loaded environment from .env")
        environ = os.environ
    env_layer = _environment_layer(environ)
    if env_layer:
        logger.verbose(
            "CONFIG",
            f"Environment overrides: {', '.join(sorted(_flatten_keys(env_layer)))}",
        )
        merged = _deep_merge_dicts(merged, env_layer)

    if overrides:
        merged = _deep_merge_dicts(merged, overrides)

    settings = _to_settings(merged)
    logger.debug("CONFIG", f"Resolved settings: {settings}")
    return settings


def create_api(
    settings: Settings, session: requests.Session | None = None
) -> DistributionApi:
    """Create a DistributionApi configured from settings.

    Args:
        settings: Resolved settings.
        session: Optional session to share between clients.

    Returns:
        A new client for settings.project.
    """
    return DistributionApi(
        settings.api_base,
        settings.project,
        session=session,
        user_agent=settings.user_agent,
        timeout=settings.timeout,
    )


def _flatten_keys(cfg: Mapping[str, Any], prefix: str = "") -> list[str]:
    keys: list[str] = []
    for k, v in cfg.items():
        if isinstance(v, Mapping):
            keys.extend(_flatten_keys(v, f"{prefix}{k}."))
        else:
            keys.append(f"{prefix}{k}")
    return keys
