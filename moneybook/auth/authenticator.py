"""
Session Authenticator

Single-user login: a shared password unlocks the app and produces an
opaque session token. The token is the only thing a client holds.

SECURITY NOTES:
- Passwords are compared in constant time
- Tokens carry 256 bits of randomness (secrets.token_hex(32))
- Sessions expire through the record store TTL; expiresAt is also
  checked on read in case a backend keeps rows past their TTL
- Tokens are never logged in full
"""

import hmac
import secrets
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from moneybook.auth.rate_limit import LoginRateLimiter
from moneybook.logs import mask_token
from moneybook.models.session import Session
from moneybook.services.storage import RecordStoreInterface, session_key


logger = structlog.get_logger(__name__)


class AuthError(Exception):
    """Base exception for authentication failures."""
    pass


class InvalidCredentialError(AuthError):
    """The submitted password does not match."""
    pass


class RateLimitedError(AuthError):
    """Too many failed attempts from one client."""

    def __init__(self, retry_after_seconds: int, message: str):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(message)


class SharedPasswordVerifier:
    """
    Credential verifier for a single configured secret.

    The secret comes from configuration, not from a user table.
    """

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("A non-empty password must be configured")
        self._secret = secret.encode("utf-8")

    def verify(self, password: str) -> bool:
        return hmac.compare_digest(password.encode("utf-8"), self._secret)


class SessionAuthenticator:
    """
    Issues, checks and revokes session tokens.

    Args:
        store: Record store holding session_<token> entries
        verifier: Checks the submitted password
        user_id: User id every session is bound to (single-user app)
        ttl_seconds: Session lifetime
        rate_limiter: Optional brute-force protection
        clock: Returns the current UTC time
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        verifier: SharedPasswordVerifier,
        user_id: str,
        ttl_seconds: int = 86400,
        rate_limiter: Optional[LoginRateLimiter] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._store = store
        self._verifier = verifier
        self._user_id = user_id
        self._ttl_seconds = ttl_seconds
        self._rate_limiter = rate_limiter
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    async def login(self, password: str, client: Optional[str] = None) -> str:
        """
        Check the password and open a session.

        Args:
            password: Submitted password
            client: Client identifier (IP address) for rate limiting

        Returns:
            The new session token

        Raises:
            RateLimitedError: If the client is locked out
            InvalidCredentialError: If the password is wrong
        """
        if self._rate_limiter and client:
            if await self._rate_limiter.is_locked(client):
                logger.warning("login_rate_limited", client=client)
                raise RateLimitedError(
                    retry_after_seconds=self._rate_limiter.lockout_seconds,
                    message="Too many failed attempts, try again later",
                )

        if not self._verifier.verify(password):
            if self._rate_limiter and client:
                await self._rate_limiter.record_failure(client)
            logger.info("login_failed", client=client)
            raise InvalidCredentialError("Incorrect password")

        if self._rate_limiter and client:
            await self._rate_limiter.reset(client)

        token = secrets.token_hex(32)
        session = Session.starting_at(self._user_id, self._clock(), self._ttl_seconds)
        await self._store.put(
            session_key(token),
            session.to_record(),
            ttl_seconds=self._ttl_seconds,
        )

        logger.info("login_succeeded", user_id=self._user_id, token=mask_token(token))
        return token

    async def get_session(self, token: Optional[str]) -> Optional[Session]:
        """Return the live session for a token, or None."""
        if not token:
            return None

        record = await self._store.get(session_key(token))
        if record is None:
            return None

        try:
            session = Session.model_validate(record)
        except ValueError:
            logger.warning("session_malformed", token=mask_token(token))
            return None

        if session.is_expired(self._clock()):
            return None
        return session

    async def is_authenticated(self, token: Optional[str]) -> bool:
        return await self.get_session(token) is not None

    async def logout(self, token: Optional[str]) -> None:
        """Revoke a session. Unknown or empty tokens are ignored."""
        if not token:
            return
        await self._store.delete(session_key(token))
        logger.info("logout", token=mask_token(token))
