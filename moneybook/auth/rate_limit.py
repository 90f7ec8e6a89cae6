"""Failed-login counter keyed by client address."""

from moneybook.services.storage import RecordStoreInterface, rate_limit_key


class LoginRateLimiter:
    """
    Locks a client out after too many failed logins.

    The counter lives in the record store under limit_<client> and
    expires lockout_seconds after the last failure. Like every other
    read-modify-write on the store, concurrent failures may undercount.
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        max_attempts: int = 5,
        lockout_seconds: int = 900,
    ):
        self._store = store
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds

    async def attempts(self, client: str) -> int:
        value = await self._store.get(rate_limit_key(client))
        try:
            return int(value or 0)
        except (TypeError, ValueError):
            return 0

    async def is_locked(self, client: str) -> bool:
        return await self.attempts(client) >= self.max_attempts

    async def record_failure(self, client: str) -> int:
        count = await self.attempts(client) + 1
        await self._store.put(
            rate_limit_key(client),
            count,
            ttl_seconds=self.lockout_seconds,
        )
        return count

    async def reset(self, client: str) -> None:
        await self._store.delete(rate_limit_key(client))
