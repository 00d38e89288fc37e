"""REST API layer: models, preferences, errors and the typed client."""

from yatijapp_tui.api.client import YatijappApi
from yatijapp_tui.api.errors import ApiError, NotFoundError, UnauthorizedError, UnexpectedApiError
from yatijapp_tui.api.models import Action, Record, RecordParent, RecordParents, RecordType, Session, Target
from yatijapp_tui.api.preferences import Filter, Preferences, default_preferences

__all__ = [
    "Action",
    "ApiError",
    "Filter",
    "NotFoundError",
    "Preferences",
    "Record",
    "RecordParent",
    "RecordParents",
    "RecordType",
    "Session",
    "Target",
    "UnauthorizedError",
    "UnexpectedApiError",
    "YatijappApi",
    "default_preferences",
]
