"""
Yatijapp TUI - terminal client for the yatijapp productivity service.

Manages a three-level hierarchy of records (targets, actions and
sessions) stored on a remote REST service, with token based
authentication and per-kind list preferences.
"""

from yatijapp_tui.constants import APP_NAME, APP_VERSION

__version__ = APP_VERSION
__app_name__ = APP_NAME

__all__ = [
    "APP_NAME",
    "APP_VERSION",
    "__version__",
    "__app_name__",
]
