"""Credential checks for the sign-in and sign-up forms.

Failures are reported to the form as a field-level message. Nothing here
is persisted or logged.
"""

import re
from dataclasses import dataclass
from typing import Optional

# Common disposable/fake e-mail domains
DISPOSABLE_DOMAINS = frozenset({
    "tempmail.com",
    "10minutemail.com",
    "mailinator.com",
    "guerrillamail.com",
    "yopmail.com",
    "getnada.com",
    "dispostable.com",
    "temp-mail.org",
})

_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

MIN_SIGNUP_STRENGTH = 2
STRENGTH_LABELS = ["Weak", "Fair", "Good", "Strong"]


class CredentialsError(ValueError):
    """A credential field failed validation."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


@dataclass
class EmailCheck:
    valid: bool
    message: str = ""


def validate_email(email: str) -> EmailCheck:
    """Check format and reject disposable domains."""
    if not _EMAIL_RE.match(email):
        return EmailCheck(False, "Invalid e-mail format.")

    domain = email.split("@", 1)[1].lower()
    if domain in DISPOSABLE_DOMAINS:
        return EmailCheck(False, "Temporary e-mail addresses are not allowed.")

    return EmailCheck(True)


def password_strength(password: str) -> int:
    """Score 0-4: one point each for length > 7, uppercase, digit, symbol."""
    score = 0
    if len(password) > 7:
        score += 1
    if re.search(r"[A-Z]", password):
        score += 1
    if re.search(r"[0-9]", password):
        score += 1
    if re.search(r"[^A-Za-z0-9]", password):
        score += 1
    return score


def strength_label(password: str) -> str:
    score = password_strength(password)
    return STRENGTH_LABELS[score - 1] if score else "Minimum 8 chars"


def check_credentials(
    email: str,
    password: str,
    confirm_password: Optional[str] = None,
    signup: bool = False,
) -> None:
    """
    Validate a login or sign-up submission.

    Raises:
        CredentialsError: On the first failing field
    """
    email_check = validate_email(email)
    if not email_check.valid:
        raise CredentialsError("email", email_check.message)

    if signup:
        if password_strength(password) < MIN_SIGNUP_STRENGTH:
            raise CredentialsError("password", "Your password is too weak.")
        if password != confirm_password:
            raise CredentialsError("confirm_password", "Passwords do not match.")
    elif not password:
        raise CredentialsError("password", "Enter your password.")
