"""Sign-in, sign-up/activation and password-reset forms."""

from __future__ import annotations

from typing import Optional, Tuple

from yatijapp_tui.tui import fields as f
from yatijapp_tui.tui.fields import TextField
from yatijapp_tui.tui.pages.form import FormState

AUTH_FORM_WIDTH = 40


class SigninForm(FormState):
    def __init__(self) -> None:
        super().__init__([f.email_field(AUTH_FORM_WIDTH), f.password_field(AUTH_FORM_WIDTH)])

    def submit(self) -> Tuple[str, str]:
        """``(email, password)`` after validating both fields."""
        self.validate()
        return self.fields[0].value, self.fields[1].value

    def failed(self) -> None:
        """Forget the password after a rejected sign-in."""
        password = self.fields[1]
        assert isinstance(password, TextField)
        password.clear()


class SignupForm(FormState):
    """Two stages: account details, then the mailed activation token.

    The email and password typed in the first stage are kept so the
    account can be signed in right after activation.
    """

    SIGNUP = "signup"
    ACTIVATE = "activate"

    def __init__(self) -> None:
        self.stage = self.SIGNUP
        self.credentials: Optional[Tuple[str, str]] = None
        password = f.password_field(AUTH_FORM_WIDTH)
        super().__init__(
            [
                f.username_field(AUTH_FORM_WIDTH),
                f.email_field(AUTH_FORM_WIDTH),
                password,
                f.password_confirm_field(AUTH_FORM_WIDTH, password),
            ]
        )

    def submit_signup(self) -> Tuple[str, str, str]:
        self.validate()
        name, email, password, _ = (item.value for item in self.fields)
        return name, email, password

    def to_activation(self) -> None:
        self.credentials = (self.fields[1].value, self.fields[2].value)
        self.stage = self.ACTIVATE
        self.set_fields([f.token_field(AUTH_FORM_WIDTH, "activation token")])

    def submit_activation(self) -> str:
        self.validate()
        return self.fields[0].value


class ResetPasswordForm(FormState):
    """Email first; then the mailed token and the new password."""

    REQUEST = "request"
    RESET = "reset"

    def __init__(self) -> None:
        self.stage = self.REQUEST
        super().__init__([f.email_field(AUTH_FORM_WIDTH)])

    def submit_request(self) -> str:
        self.validate()
        return self.fields[0].value

    def to_reset(self) -> None:
        self.stage = self.RESET
        password = f.password_field(AUTH_FORM_WIDTH, "New Password")
        self.set_fields(
            [
                f.token_field(AUTH_FORM_WIDTH, "reset token"),
                password,
                f.password_confirm_field(AUTH_FORM_WIDTH, password),
            ]
        )

    def submit_reset(self) -> Tuple[str, str]:
        self.validate()
        return self.fields[0].value, self.fields[1].value
