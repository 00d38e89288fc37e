"""Pydantic configuration models for the yatijapp client.

The ``config.toml`` layout::

    [api]
    endpoint = "https://api.yatij.app"

    [preference]
    displayMode = "auto"
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from yatijapp_tui.constants import DEFAULT_API_ENDPOINT, DEFAULT_DISPLAY_MODE, DISPLAY_MODES


class ApiConfig(BaseModel):
    """Where the REST service lives."""

    endpoint: str = Field(
        default=DEFAULT_API_ENDPOINT,
        description="Root URL of the yatijapp API.",
    )

    @field_validator("endpoint")
    @classmethod
    def _check_endpoint(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("endpoint must start with http:// or https://")
        return v


class PreferenceConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    display_mode: str = Field(
        default=DEFAULT_DISPLAY_MODE,
        alias="displayMode",
        description="Colour scheme: light, dark or auto.",
    )

    @field_validator("display_mode")
    @classmethod
    def _check_display_mode(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in DISPLAY_MODES:
            raise ValueError(f"displayMode must be one of {', '.join(DISPLAY_MODES)}")
        return v


class YatijappConfig(BaseModel):
    """Top-level configuration document."""

    api: ApiConfig = Field(default_factory=ApiConfig)
    preference: PreferenceConfig = Field(default_factory=PreferenceConfig)
