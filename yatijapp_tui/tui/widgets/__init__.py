"""Textual widgets used by the yatijapp screens."""

from yatijapp_tui.tui.widgets.chrome import ErrorLine, HelperBar, TitleBar
from yatijapp_tui.tui.widgets.form_view import FormView

__all__ = ["ErrorLine", "FormView", "HelperBar", "TitleBar"]
