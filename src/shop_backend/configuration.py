from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from dotenv import load_dotenv
from omegaconf import DictConfig, OmegaConf
from omegaconf.errors import OmegaConfBaseException

CONFIG_PATH = Path(__file__).resolve().parent / "config" / "config.yaml"


class ConfigurationError(ValueError):
    """Raised when settings cannot be built from defaults and environment."""


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


# Environment variable -> (dotted settings key, parser)
ENV_OVERRIDES: Dict[str, Tuple[str, Callable[[str, str], Any]]] = {
    "PORT": ("server.port", _parse_int),
    "HOST": ("server.host", lambda _name, raw: raw),
    "WORKERS": ("server.workers", _parse_int),
    "DATABASE_URL": ("database.url", lambda _name, raw: raw),
    "CLIENT_URL": ("cors.client_url", lambda _name, raw: raw),
    "LOG_LEVEL": ("logging.level", lambda _name, raw: raw.upper()),
}


@lru_cache(maxsize=1)
def _load_default_config() -> DictConfig:
    if not CONFIG_PATH.exists():
        raise FileNotFoundError(f"Default config not found at {CONFIG_PATH}")
    return OmegaConf.load(CONFIG_PATH)


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Collect settings overrides from environment variables.

    Empty values are ignored so that ``PORT=`` in a ``.env`` file behaves the
    same as an unset variable.

    Args:
        environ: Mapping to read from (default: ``os.environ`` after loading ``.env``)

    Returns:
        Nested dictionary suitable for ``make_runtime_config``

    Raises:
        ConfigurationError: If a numeric variable cannot be parsed
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    overrides: Dict[str, Any] = {}
    for name, (dotted_key, parse) in ENV_OVERRIDES.items():
        raw = environ.get(name)
        if raw is None or raw.strip() == "":
            continue
        section, key = dotted_key.split(".", 1)
        overrides.setdefault(section, {})[key] = parse(name, raw.strip())
    return overrides


def make_runtime_config(overrides: Dict[str, Any]) -> DictConfig:
    base_container = OmegaConf.to_container(_load_default_config(), resolve=False)
    base = OmegaConf.create(base_container)
    OmegaConf.set_struct(base, True)

    try:
        merged = DictConfig(OmegaConf.merge(base, OmegaConf.create(overrides)))
    except OmegaConfBaseException as exc:
        raise ConfigurationError(f"Invalid settings override: {exc}") from exc
    return merged


def load_settings(
    overrides: Optional[Dict[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> DictConfig:
    """
    Build the runtime settings: packaged defaults, then environment, then
    explicit overrides (e.g. command line options).
    """
    combined = OmegaConf.merge(OmegaConf.create(env_overrides(environ)), OmegaConf.create(overrides or {}))
    return make_runtime_config(OmegaConf.to_container(combined))  # type: ignore[arg-type]


def settings_to_container(settings: DictConfig) -> Dict[str, Any]:
    """Plain-dict form of the settings, safe to pickle into worker processes."""
    return OmegaConf.to_container(settings, resolve=True)  # type: ignore[return-value]


def settings_from_container(container: Dict[str, Any]) -> DictConfig:
    settings = OmegaConf.create(container)
    OmegaConf.set_struct(settings, True)
    return settings
