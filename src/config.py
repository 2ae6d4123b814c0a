"""YAML configuration loader with env var resolution and Pydantic validation.

Loads config from (priority order):
1. explicit path (``--config`` CLI flag or ``RDIQUOTE_CONFIG_PATH``)
2. ./rdiquote.yaml (working directory)
3. ~/.rdiquote/config.yaml (user home)

Without a file the defaults below apply. ``${VAR}`` references in YAML values
resolve from environment at load time. Environment variables then override
YAML: ``RDIQUOTE_<SECTION>_<KEY>``, plus the deployment's conventional
variables ``EASYPOST_API_KEY``, ``WEBHOOK_URL`` and ``ALLOWED_ORIGINS``.

The resulting ``AppConfig`` is frozen. It is built once at startup and
passed by reference to every component; business logic never reads the
environment itself.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

logger = logging.getLogger(__name__)

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

_ENV_PREFIX = "RDIQUOTE_"

# Conventional variable names -> (section, field)
_LEGACY_ENV_VARS = {
    "EASYPOST_API_KEY": ("provider", "api_key"),
    "WEBHOOK_URL": ("notifications", "webhook_url"),
    "ALLOWED_ORIGINS": ("cors", "allowed_origins"),
}

Mode = Literal["quote", "classification"]


def resolve_env_vars(value: str) -> str:
    """Resolve ${VAR} references in a string from environment variables.

    Args:
        value: String potentially containing ${VAR} references.

    Returns:
        String with all ${VAR} references replaced by their env values.
        Missing env vars resolve to empty string.
    """
    def _replace(match: re.Match) -> str:
        return os.environ.get(match.group(1), "")

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _resolve_env_vars_recursive(data: Any) -> Any:
    if isinstance(data, str):
        return resolve_env_vars(data)
    elif isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    return data


def _split_csv(value: Any) -> Any:
    """Accept a comma-separated string where a list is expected."""
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ServerConfig(_Frozen):
    """Uvicorn bind and log settings."""

    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "info"


class ProviderConfig(_Frozen):
    """EasyPost address verification settings."""

    api_key: str = ""
    base_url: str = "https://api.easypost.com"
    timeout_seconds: float = 10.0


class NotificationConfig(_Frozen):
    """Slack webhook sink and route predicate.

    Non-error events are only sent when the request referer contains
    ``referer_marker`` or the ``provenance_header`` equals
    ``provenance_value``. Error events are always sent.
    """

    webhook_url: str = ""
    referer_marker: str = ""
    provenance_header: str = "X-Page-Context"
    provenance_value: str = ""
    footer: str = "RDI Checker"
    timeout_seconds: float = 5.0


class CorsConfig(_Frozen):
    """Origin echo allow-list; other origins get ``*``."""

    allowed_origins: tuple[str, ...] = ()
    allow_methods: tuple[str, ...] = ("POST", "OPTIONS")
    allow_headers: tuple[str, ...] = ("Content-Type", "Authorization", "X-API-Key")

    @field_validator("allowed_origins", "allow_methods", "allow_headers", mode="before")
    @classmethod
    def _accept_csv(cls, value: Any) -> Any:
        return _split_csv(value)


class AuthConfig(_Frozen):
    """Optional shared-secret gate; empty key disables it."""

    api_key: str = ""


class AppConfig(_Frozen):
    """Top-level configuration for the RDI Quote service."""

    server: ServerConfig = ServerConfig()
    provider: ProviderConfig = ProviderConfig()
    notifications: NotificationConfig = NotificationConfig()
    cors: CorsConfig = CorsConfig()
    auth: AuthConfig = AuthConfig()
    modes: tuple[Mode, ...] = ("quote", "classification")

    @field_validator("modes", mode="before")
    @classmethod
    def _accept_csv_modes(cls, value: Any) -> Any:
        return _split_csv(value)


def _find_config_file() -> Path | None:
    """Search for config file in standard locations."""
    candidates = [
        Path.cwd() / "rdiquote.yaml",
        Path.cwd() / "rdiquote.yml",
        Path.home() / ".rdiquote" / "config.yaml",
        Path.home() / ".rdiquote" / "config.yml",
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def _apply_env_overrides(data: dict[str, Any], environ: dict[str, str]) -> dict[str, Any]:
    """Apply conventional and RDIQUOTE_<SECTION>_<KEY> env var overrides.

    Matches section names by longest prefix, so ``RDIQUOTE_CORS_ALLOWED_ORIGINS``
    maps to section ``cors``, field ``allowed_origins``. ``RDIQUOTE_MODES``
    sets the top-level mode list. Values stay strings; Pydantic coerces
    them to the field types.

    Args:
        data: Parsed YAML config dict.
        environ: Environment mapping to read from.

    Returns:
        Config dict with env var overrides applied.
    """
    known_sections = sorted(
        (name for name in AppConfig.model_fields if name != "modes"),
        key=len,
        reverse=True,
    )
    # An empty YAML section (`provider:`) parses as None
    for section in known_sections:
        if section in data and data[section] is None:
            data[section] = {}

    for env_key, (section, field) in _LEGACY_ENV_VARS.items():
        value = environ.get(env_key, "").strip()
        if value and isinstance(data.setdefault(section, {}), dict):
            data[section][field] = value

    for key, value in environ.items():
        if not key.startswith(_ENV_PREFIX):
            continue
        suffix = key[len(_ENV_PREFIX):].lower()
        if suffix == "modes":
            data["modes"] = value
            continue
        for section in known_sections:
            section_prefix = section + "_"
            if suffix.startswith(section_prefix) and len(suffix) > len(section_prefix):
                field = suffix[len(section_prefix):]
                if isinstance(data.setdefault(section, {}), dict):
                    data[section][field] = value
                break
    return data


def load_config(
    config_path: str | None = None,
    environ: dict[str, str] | None = None,
) -> AppConfig:
    """Load RDI Quote configuration from YAML file and environment.

    Args:
        config_path: Explicit path to config file. If None, uses
            RDIQUOTE_CONFIG_PATH or searches standard locations.
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        Parsed and validated AppConfig.

    Raises:
        FileNotFoundError: If an explicit config path does not exist.
    """
    env = dict(os.environ if environ is None else environ)
    explicit = config_path or env.get("RDIQUOTE_CONFIG_PATH")

    if explicit:
        path: Path | None = Path(explicit)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {explicit}")
    else:
        path = _find_config_file()

    raw_data: dict[str, Any] = {}
    if path is not None:
        logger.info("Loading config from %s", path)
        with open(path) as f:
            raw_data = yaml.safe_load(f) or {}
        if not isinstance(raw_data, dict):
            raise ValueError(f"Config file {path} must contain a mapping at the top level")

    data = _resolve_env_vars_recursive(raw_data)
    data = _apply_env_overrides(data, env)
    return AppConfig(**data)
