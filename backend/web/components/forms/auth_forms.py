"""
Sign-in and password reset forms.
"""
from typing import Optional

from ..base import Component
from .fields import TextInputField
from .submit import SubmitButton

LOGIN_ERRORS = {
    "invalid_credentials": "Invalid email or password.",
    "missing_fields": "Please enter your email and password.",
    "backend_error": "Sign-in is temporarily unavailable. Please try again later.",
}


class LoginForm(Component):
    def __init__(self, *, email: str = "", error: Optional[str] = None, from_path: Optional[str] = None) -> None:
        self.email = email
        self.error = error
        self.from_path = from_path

    def render(self) -> str:
        error_html = ""
        if self.error:
            message = LOGIN_ERRORS.get(self.error, LOGIN_ERRORS["backend_error"])
            error_html = f'<div class="form-error" role="alert">{self.escape(message)}</div>'
        from_html = (
            f'<input type="hidden" name="from" value="{self.escape(self.from_path)}">' if self.from_path else ""
        )
        email = TextInputField("email", "Email", required=True).render(
            value=self.email, input_type="email", autocomplete="username"
        )
        password = TextInputField("password", "Password", required=True).render(
            input_type="password", autocomplete="current-password"
        )
        return f"""
        <section class="auth-card">
            <h1>Sign in</h1>
            {error_html}
            <form method="post" action="/login" class="login-form">
                {from_html}
                {email}
                {password}
                <div class="form-actions">{SubmitButton("Sign in").render()}</div>
            </form>
        </section>"""


class ResetPasswordForm(Component):
    """New-password form for the emailed reset link."""

    def __init__(self, uid: str, token: str, *, error: Optional[str] = None, done: bool = False) -> None:
        self.uid = uid
        self.token = token
        self.error = error
        self.done = done

    def render(self) -> str:
        if self.done:
            return """
        <section class="auth-card">
            <h1>Password updated</h1>
            <p>Your password has been reset. <a href="/login">Sign in</a> with the new password.</p>
        </section>"""
        error_html = f'<div class="form-error" role="alert">{self.escape(self.error)}</div>' if self.error else ""
        action = f"/reset-password/{self.escape(self.uid)}/{self.escape(self.token)}"
        password = TextInputField("password", "New password", required=True).render(
            input_type="password", autocomplete="new-password"
        )
        confirm = TextInputField("confirm_password", "Confirm password", required=True).render(
            input_type="password", autocomplete="new-password"
        )
        return f"""
        <section class="auth-card">
            <h1>Reset password</h1>
            {error_html}
            <form method="post" action="{action}" class="reset-password-form">
                {password}
                {confirm}
                <div class="form-actions">{SubmitButton("Reset password").render()}</div>
            </form>
        </section>"""
