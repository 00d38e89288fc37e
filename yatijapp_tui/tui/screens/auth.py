"""Sign-in, sign-up and password-reset pages."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from rich.text import Text
from textual.app import ComposeResult
from textual.widgets import Static

from yatijapp_tui.api import ApiError
from yatijapp_tui.errors import ValidationError
from yatijapp_tui.tui.context import AppContext
from yatijapp_tui.tui.events import ApiSuccess, SwitchToMenu, ValidationFailed, is_stale
from yatijapp_tui.tui.pages.auth_forms import (
    AUTH_FORM_WIDTH,
    ResetPasswordForm,
    SigninForm,
    SignupForm,
)
from yatijapp_tui.tui.pages.form import FormState
from yatijapp_tui.tui.screens.base import YatijappScreen, column_rules
from yatijapp_tui.tui.style import NORMAL_DIM, HelperItem
from yatijapp_tui.tui.widgets.form_view import FormView

logger = logging.getLogger(__name__)

ACTIVATION_NOTICE = (
    "An email with activation token has been sent to you, "
    "please enter the token below to activate your account."
)
RESET_NOTICE = "An email with password reset token has been sent to you, please enter the token and your new password below."


class AuthScreen(YatijappScreen):
    """Centred form; ``esc`` returns to the menu, ``enter`` submits."""

    DEFAULT_CSS = f"""
    AuthScreen #page-body {{
        align: center top;
    }}
    #auth-notice, #auth-form {{
        {column_rules(AUTH_FORM_WIDTH + 4)}
        height: auto;
    }}
    """

    def __init__(self, ctx: AppContext, prev: Any = None, **kwargs: Any) -> None:
        super().__init__(ctx, prev, **kwargs)
        self.form: FormState = self.build_form()
        self.notice = ""

    def build_form(self) -> FormState:
        raise NotImplementedError

    def compose_content(self) -> ComposeResult:
        yield Static("", id="auth-notice")
        yield FormView(self.form, numbered=False, id="auth-form")

    def helper_items(self) -> Sequence[HelperItem]:
        return [("esc", "back"), ("tab/shift+tab", "navigate"), ("enter", "submit"), ("<C-c>", "quit")]

    def render_page(self) -> None:
        if not self.is_mounted:
            return
        self.query_one("#auth-notice", Static).update(Text(self.notice, style=NORMAL_DIM))
        self.query_one("#auth-form", FormView).show_form(self.form)
        self.render_chrome()

    def handle_page_key(self, key: str, character: Optional[str]) -> bool:
        if key == "esc":
            self.post_message(SwitchToMenu())
            return True
        if key == "tab":
            self.form.next()
        elif key == "shift+tab":
            self.form.prev()
        elif key == "enter":
            try:
                self.submit()
            except ValidationError as exc:
                self.post_message(ValidationFailed(self.source_tag, exc))
        else:
            self.form.handle_key(key, character)
        self.render_page()
        return True

    def submit(self) -> None:
        raise NotImplementedError

    def on_api_success(self, message: ApiSuccess) -> None:
        if is_stale(message, self.source_tag):
            return
        message.stop()
        self.set_loading(False)
        self.succeeded(message.msg)

    def succeeded(self, msg: str) -> None:
        self.post_message(SwitchToMenu(msg))

    def handle_failure(self, error: Exception, action: str = "") -> None:
        # Credentials and tokens are rejected with 401/403 here; show them.
        extra = {"action": action, "type": type(error).__name__, "occurrence": type(self).__name__}
        if isinstance(error, ApiError):
            extra["status"] = error.status
        logger.error("%s failed: %s", action or "Request", error, extra=extra)
        self.show_error(error)
        self.render_page()


# ── Sign in ─────────────────────────────────────────────────────────


class SigninScreen(AuthScreen):
    def build_form(self) -> FormState:
        return SigninForm()

    def title_contents(self) -> Sequence[str]:
        return ["Sign In"]

    def helper_items(self) -> Sequence[HelperItem]:
        return [("esc", "back"), ("enter", "submit"), ("tab", "navigate"), ("<C-c>", "quit")]

    def submit(self) -> None:
        email, password = self.form.submit()  # type: ignore[attr-defined]
        self.set_loading(True)
        self.spawn(self._signin(email, password), name="signin")

    async def _signin(self, email: str, password: str) -> None:
        try:
            await self.ctx.api.signin(email, password)
        except ApiError as exc:
            self.report_failure(exc, "POST Authentication token")
            return
        self.post_message(ApiSuccess(self.source_tag, "Signed in successfully"))

    def handle_failure(self, error: Exception, action: str = "") -> None:
        form = self.form
        assert isinstance(form, SigninForm)
        form.failed()
        super().handle_failure(error, action)


# ── Sign up ─────────────────────────────────────────────────────────


class SignupScreen(AuthScreen):
    """Registration, then activation, then an automatic sign-in."""

    def build_form(self) -> FormState:
        return SignupForm()

    @property
    def signup(self) -> SignupForm:
        assert isinstance(self.form, SignupForm)
        return self.form

    def title_contents(self) -> Sequence[str]:
        if self.signup.stage == SignupForm.ACTIVATE:
            return ["Activate Account"]
        return ["Sign Up"]

    def submit(self) -> None:
        form = self.signup
        if form.stage == SignupForm.SIGNUP:
            name, email, password = form.submit_signup()
            self.set_loading(True)
            self.spawn(self._register(name, email, password), name="signup")
        else:
            token = form.submit_activation()
            self.set_loading(True)
            self.spawn(self._activate(token), name="activate")

    async def _register(self, name: str, email: str, password: str) -> None:
        try:
            await self.ctx.api.register(name, email, password)
        except ApiError as exc:
            self.report_failure(exc, "POST User")
            return
        self.post_message(ApiSuccess(self.source_tag, ""))

    async def _activate(self, token: str) -> None:
        try:
            await self.ctx.api.activate(token)
        except ApiError as exc:
            self.report_failure(exc, "PUT User activation")
            return

        credentials = self.signup.credentials
        msg = "Account activated"
        if credentials is None:
            msg = "Account activated, you can now sign in."
        else:
            try:
                await self.ctx.api.signin(*credentials)
            except ApiError as exc:
                logger.error(
                    "Sign in after activation failed: %s",
                    exc,
                    extra={"action": "POST Authentication token", "status": exc.status},
                )
                msg = "Account activated, you can now sign in."
        self.post_message(ApiSuccess(self.source_tag, msg))

    def succeeded(self, msg: str) -> None:
        form = self.signup
        if form.stage == SignupForm.SIGNUP:
            form.to_activation()
            self.notice = ACTIVATION_NOTICE
            self.error = None
            self.render_page()
            return
        self.post_message(SwitchToMenu(msg))


# ── Reset password ──────────────────────────────────────────────────


class ResetPasswordScreen(AuthScreen):
    def build_form(self) -> FormState:
        return ResetPasswordForm()

    @property
    def reset(self) -> ResetPasswordForm:
        assert isinstance(self.form, ResetPasswordForm)
        return self.form

    def title_contents(self) -> Sequence[str]:
        return ["Reset Password"]

    def submit(self) -> None:
        form = self.reset
        if form.stage == ResetPasswordForm.REQUEST:
            email = form.submit_request()
            self.set_loading(True)
            self.spawn(self._request(email), name="reset-request")
        else:
            token, password = form.submit_reset()
            self.set_loading(True)
            self.spawn(self._apply(token, password), name="reset-apply")

    async def _request(self, email: str) -> None:
        try:
            msg = await self.ctx.api.request_password_reset(email)
        except ApiError as exc:
            self.report_failure(exc, "POST Password reset token")
            return
        self.post_message(ApiSuccess(self.source_tag, msg))

    async def _apply(self, token: str, password: str) -> None:
        try:
            msg = await self.ctx.api.reset_password(token, password)
        except ApiError as exc:
            self.report_failure(exc, "PUT User password")
            return
        self.post_message(ApiSuccess(self.source_tag, msg))

    def succeeded(self, msg: str) -> None:
        form = self.reset
        if form.stage == ResetPasswordForm.REQUEST:
            form.to_reset()
            self.notice = msg or RESET_NOTICE
            self.error = None
            self.render_page()
            return
        self.post_message(SwitchToMenu(msg))
