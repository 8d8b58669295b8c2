from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "EVENTHUB_"
ENV_CONFIG_FILE = "EVENTHUB_CONFIG"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _as_bool(value: Any) -> bool:
    """Interpret common truthy/falsey spellings (1/0, true/false, yes/no, on/off)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        v = value.strip().lower()
        if v in {"1", "true", "yes", "y", "on"}:
            return True
        if v in {"0", "false", "no", "n", "off", ""}:
            return False
    raise ValueError(f"Cannot interpret {value!r} as a boolean")


def _as_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{key} must be an integer, got {value!r}") from exc


@dataclass(frozen=True)
class DispatcherConfig:
    """Tunables for :class:`eventhub.manager.EventManager`.

    Attributes:
        max_depth: Maximum number of nested sends. ``0`` or less disables the guard.
        preallocate: Listener records the pool builds up-front.
        raise_errors: When False, callback errors are logged and swallowed.
            When True, the remaining callbacks still run and the first error
            is re-raised once the send has finished its bookkeeping.
        log_level: Level the CLI applies to the ``eventhub`` logger.
    """

    max_depth: int = 20
    preallocate: int = 0
    raise_errors: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DispatcherConfig":
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown dispatcher config keys: %s", ", ".join(unknown))

        values: Dict[str, Any] = {}
        if "max_depth" in data:
            values["max_depth"] = _as_int("max_depth", data["max_depth"])
        if "preallocate" in data:
            preallocate = _as_int("preallocate", data["preallocate"])
            if preallocate < 0:
                raise ValueError(f"preallocate must be >= 0, got {preallocate}")
            values["preallocate"] = preallocate
        if "raise_errors" in data:
            values["raise_errors"] = _as_bool(data["raise_errors"])
        if "log_level" in data:
            level = str(data["log_level"]).strip().upper()
            if level not in _LOG_LEVELS:
                raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}, got {data['log_level']!r}")
            values["log_level"] = level
        return cls(**values)


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Dispatcher config at {path} must be a mapping, got {type(raw).__name__}")
    return raw


def _load_defaults() -> Dict[str, Any]:
    try:
        text = resources.files("eventhub").joinpath("data").joinpath("dispatcher.yaml").read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("Embedded dispatcher defaults not found; using dataclass defaults.")
        return dataclasses.asdict(DispatcherConfig())
    logger.debug("Loaded embedded dispatcher config resource")
    return yaml.safe_load(text) or {}


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for field in dataclasses.fields(DispatcherConfig):
        key = ENV_PREFIX + field.name.upper()
        if key in environ:
            overrides[field.name] = environ[key]
    return overrides


def load_config(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> DispatcherConfig:
    """Build a :class:`DispatcherConfig` from layered sources.

    Order (later wins): embedded ``eventhub/data/dispatcher.yaml``, the user
    file given by ``path`` or ``$EVENTHUB_CONFIG``, then ``EVENTHUB_*``
    environment variables.
    """
    env = os.environ if environ is None else environ
    data = _load_defaults()

    if path is None and env.get(ENV_CONFIG_FILE):
        path = env[ENV_CONFIG_FILE]
    if path is not None:
        user_path = Path(path)
        if user_path.exists():
            data.update(_load_yaml(user_path))
            logger.debug("Loaded dispatcher config from path: %s", user_path)
        else:
            logger.warning("Dispatcher config file not found: %s (using defaults)", user_path)

    data.update(_env_overrides(env))
    config = DispatcherConfig.from_dict(data)
    logger.info(
        "Dispatcher config: max_depth=%d preallocate=%d raise_errors=%s",
        config.max_depth,
        config.preallocate,
        config.raise_errors,
    )
    return config
