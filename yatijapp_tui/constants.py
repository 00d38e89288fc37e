"""Shared constants for the yatijapp terminal client."""

import os

APP_NAME = "Yatijapp"
APP_VERSION = "0.3.0"
AUTHOR = "liuminhaw"

# API defaults
DEFAULT_API_ENDPOINT = "https://api.yatij.app"
API_PREFIX = "/v1"
DISPLAY_MODES = ("light", "dark", "auto")
DEFAULT_DISPLAY_MODE = "auto"

# User-scoped state
CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".yatijapp")
CONFIG_FILE_NAMES = ("config.toml", "config.yaml", "config.yml")
TOKEN_FILE = os.path.join(CONFIG_DIR, "creds", "token.json")

# Logging defaults
LOG_FILE = os.path.join(CONFIG_DIR, "tui.log")
DEFAULT_LOG_LEVEL = "INFO"
LOG_MAX_BYTES = 100 * 1024 * 1024  # 100 MiB
LOG_BACKUP_COUNT = 3
LOG_MAX_AGE_DAYS = 30

# Temporary notes live under $TMPDIR/yatijapp-tui/notes
NOTES_SUBDIR = os.path.join("yatijapp-tui", "notes")

# Layout
VIEW_WIDTH = 80
FORM_WIDTH = 70
MIN_CONTENT_WIDTH = 40
LIST_PAGE_SIZE = 10
SELECTOR_PAGE_SIZE = 6
# Records requested per server page
FETCH_PAGE_SIZE = 50

# Preferences schema version understood by this client
PREFERENCES_VERSION = "2025-12-09"
