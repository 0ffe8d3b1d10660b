import html

from flask import current_app
from wtforms import BooleanField, PasswordField, SelectField, StringField
from wtforms.validators import (
    DataRequired,
    EqualTo,
    Length,
    Regexp,
    ValidationError,
)

from copabet.forms.base import JSONForm
from copabet.models.user import ROLE_ADMIN, ROLE_USER


def sanitize_input(text):
    """Sanitize user input to prevent XSS"""
    if not text:
        return text
    return html.escape(text.strip())


def password_length(form, field):
    """Enforce the configured minimum password length"""
    min_length = current_app.config.get("MIN_PASSWORD_LENGTH", 4)
    if field.data and len(field.data) < min_length:
        raise ValidationError(
            f"Password must be at least {min_length} characters long"
        )


class LoginForm(JSONForm):
    username = StringField(
        "Username", validators=[DataRequired(), Length(min=3, max=80)]
    )
    password = PasswordField("Password", validators=[DataRequired()])
    remember_me = BooleanField("Remember Me")


class CreateUserForm(JSONForm):
    name = StringField(
        "Name",
        validators=[DataRequired(), Length(max=100)],
        filters=[sanitize_input],
    )
    username = StringField(
        "Username",
        validators=[
            DataRequired(),
            Length(
                min=3, max=80, message="Username must be between 3 and 80 characters"
            ),
            Regexp(
                r"^[a-zA-Z0-9_.-]+$",
                message="Username can only contain letters, numbers, dots, underscores, and hyphens",
            ),
        ],
    )
    password = PasswordField(
        "Password",
        validators=[
            DataRequired(),
            password_length,
        ],
    )
    role = SelectField(
        "Role",
        choices=[(ROLE_USER, "User"), (ROLE_ADMIN, "Administrator")],
        default=ROLE_USER,
    )


class ChangePasswordForm(JSONForm):
    current_password = PasswordField("Current Password", validators=[DataRequired()])
    new_password = PasswordField(
        "New Password",
        validators=[
            DataRequired(),
            password_length,
        ],
    )
    confirm_password = PasswordField(
        "Confirm New Password",
        validators=[
            DataRequired(),
            EqualTo("new_password", message="Passwords must match"),
        ],
    )
