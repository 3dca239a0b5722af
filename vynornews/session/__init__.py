"""User session lifecycle, onboarding options and credential checks."""

from .onboarding import OnboardingCatalog, default_catalog, load_catalog
from .store import SessionStore
from .validation import CredentialsError, check_credentials, password_strength, validate_email

__all__ = [
    "OnboardingCatalog",
    "default_catalog",
    "load_catalog",
    "SessionStore",
    "CredentialsError",
    "check_credentials",
    "password_strength",
    "validate_email",
]
