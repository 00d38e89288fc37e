"""Runtime state shared by every screen."""

from __future__ import annotations

from dataclasses import dataclass, field

from yatijapp_tui.api import Preferences, YatijappApi, default_preferences
from yatijapp_tui.auth import AuthClient


@dataclass
class AppContext:
    """Handed to each screen at construction time.

    ``preferences`` starts at the built-in defaults and is replaced by
    the user's stored preferences once the menu has loaded them.
    """

    api_endpoint: str
    display_mode: str
    api: YatijappApi
    auth: AuthClient
    preferences: Preferences = field(default_factory=default_preferences)
