"""Sign-up / sign-in helpers.

Validation runs before any backend call; backend failures surface as BackendError.
"""
from __future__ import annotations

import logging
from typing import Optional

from domain.constants import MIN_PASSWORD_LENGTH
from domain.models import AuthSession
from services.backend import Backend, BackendError, ValidationError

logger = logging.getLogger(__name__)

GENERIC_AUTH_ERROR = "Could not reach the sign-in service. Please try again later."

# Auth server messages worth showing as-is (4xx only)
KNOWN_AUTH_ERRORS = {
    "invalid login credentials": "Email or password is incorrect.",
    "user already registered": "An account with this email already exists.",
    "email not confirmed": "Please confirm your email before signing in.",
}


def validate_password(password: str) -> Optional[str]:
    if len(password or '') < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
    return None


def validate_email(email: str) -> Optional[str]:
    email = (email or '').strip()
    if not email or '@' not in email:
        return "Enter a valid email address."
    return None


def sign_up(backend: Backend, email: str, password: str) -> Optional[AuthSession]:
    """Register a new account. Returns None when the backend wants email confirmation first."""
    problem = validate_email(email) or validate_password(password)
    if problem:
        raise ValidationError(problem)
    session = backend.sign_up(email.strip(), password)
    logger.info("Sign-up for %s (%s)", email.strip(), "session" if session else "confirmation pending")
    return session


def sign_in(backend: Backend, email: str, password: str) -> AuthSession:
    problem = validate_email(email)
    if problem:
        raise ValidationError(problem)
    if not password:
        raise ValidationError("Enter your password.")
    return backend.sign_in(email.strip(), password)


def sign_out(backend: Backend) -> None:
    backend.sign_out()


def current_session(backend: Backend) -> Optional[AuthSession]:
    return backend.current_session()


def describe_error(error: BackendError) -> str:
    """User-facing text for a failed auth call; network and server details stay in the log."""
    if error.status is not None and 400 <= error.status < 500:
        known = KNOWN_AUTH_ERRORS.get((error.message or '').strip().lower())
        if known:
            return known
        return "Sign-in was rejected. Check your email and password."
    return GENERIC_AUTH_ERROR
