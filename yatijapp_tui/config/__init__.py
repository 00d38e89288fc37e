"""Configuration loading for the yatijapp client."""

from yatijapp_tui.config.loader import load_config, resolve_config
from yatijapp_tui.config.schema import ApiConfig, PreferenceConfig, YatijappConfig

__all__ = ["ApiConfig", "PreferenceConfig", "YatijappConfig", "load_config", "resolve_config"]
