"""Authentication package."""

from moneybook.auth.rate_limit import LoginRateLimiter
from moneybook.auth.authenticator import (
    AuthError,
    InvalidCredentialError,
    RateLimitedError,
    SessionAuthenticator,
    SharedPasswordVerifier,
)

__all__ = [
    "AuthError",
    "InvalidCredentialError",
    "LoginRateLimiter",
    "RateLimitedError",
    "SessionAuthenticator",
    "SharedPasswordVerifier",
]
