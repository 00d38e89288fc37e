"""Configuration file loading and validation.

Reads ``config.toml`` (stdlib :mod:`tomllib`) or ``config.yaml`` /
``config.yml`` (PyYAML) and validates the result against
:class:`~yatijapp_tui.config.schema.YatijappConfig`.  Command-line
values win over the file, which wins over built-in defaults.
"""

import logging
import os
import tomllib
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from yatijapp_tui.config.schema import YatijappConfig
from yatijapp_tui.constants import CONFIG_DIR, CONFIG_FILE_NAMES
from yatijapp_tui.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Recognised config file extensions.
_TOML_EXTS = frozenset({".toml"})
_YAML_EXTS = frozenset({".yaml", ".yml"})


def find_config_file(config_dir: str = CONFIG_DIR) -> Optional[str]:
    """Return the first existing config file in *config_dir*, if any."""
    for name in CONFIG_FILE_NAMES:
        candidate = os.path.join(config_dir, name)
        if os.path.isfile(candidate):
            return candidate
    return None


def _read_config_file(cfg_fpath: str) -> Dict[str, Any]:
    """Read and parse *cfg_fpath* according to its extension.

    Raises :class:`ConfigurationError` on I/O or parse errors.
    """
    ext = os.path.splitext(cfg_fpath)[1].lower()
    if ext not in _TOML_EXTS | _YAML_EXTS:
        raise ConfigurationError(
            f"Unsupported config file extension '{ext}'. "
            "Use .toml, .yaml or .yml."
        )

    try:
        if ext in _TOML_EXTS:
            with open(cfg_fpath, "rb") as f:
                raw_data = tomllib.load(f)
        else:
            with open(cfg_fpath, "r", encoding="utf-8") as f:
                raw_data = yaml.safe_load(f)
    except (OSError, tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Error reading configuration file: {cfg_fpath}\n  {exc}") from exc

    if raw_data is None:
        return {}
    if not isinstance(raw_data, dict):
        raise ConfigurationError("Top-level configuration content must be a mapping.")
    return raw_data


def _format_validation_errors(exc: ValidationError) -> str:
    """Format Pydantic validation errors into a readable multi-line string."""
    lines: List[str] = []
    for err in exc.errors():
        loc = " → ".join(str(part) for part in err["loc"])
        lines.append(f"  • {loc}: {err['msg']}")
    return "\n".join(lines)


def load_config(cfg_fpath: Optional[str] = None) -> YatijappConfig:
    """Load and validate the configuration file.

    Parameters
    ----------
    cfg_fpath:
        Explicit path.  When omitted the default locations under
        ``~/.yatijapp`` are searched; finding nothing is not an error.
    """
    if cfg_fpath is None:
        cfg_fpath = find_config_file()
        if cfg_fpath is None:
            logger.info("No configuration file found in %s, using defaults.", CONFIG_DIR)
            return YatijappConfig()
    elif not os.path.isfile(cfg_fpath):
        raise ConfigurationError(f"Configuration file not found: {cfg_fpath}")

    raw_data = _read_config_file(cfg_fpath)
    try:
        config = YatijappConfig.model_validate(raw_data)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid configuration in {cfg_fpath}:\n{_format_validation_errors(exc)}"
        ) from exc

    logger.info("Configuration loaded from %s", cfg_fpath)
    return config


def resolve_config(
    cfg_fpath: Optional[str] = None,
    *,
    api_endpoint: Optional[str] = None,
    display_mode: Optional[str] = None,
) -> YatijappConfig:
    """Load the file config and apply command-line overrides on top."""
    config = load_config(cfg_fpath)
    overrides: Dict[str, Any] = config.model_dump(by_alias=True)
    if api_endpoint:
        overrides["api"]["endpoint"] = api_endpoint
    if display_mode:
        overrides["preference"]["displayMode"] = display_mode
    try:
        return YatijappConfig.model_validate(overrides)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid command-line option:\n{_format_validation_errors(exc)}"
        ) from exc
