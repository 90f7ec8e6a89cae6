"""Login session model."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Session(BaseModel):
    """
    A login session.

    Stored under session_<token> as {"userId": ..., "expiresAt": ...}
    where expiresAt is epoch milliseconds.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str = Field(..., min_length=1)
    expires_at: int = Field(
        ...,
        description="Expiry as milliseconds since the epoch"
    )

    @classmethod
    def starting_at(cls, user_id: str, now: datetime, ttl_seconds: int) -> "Session":
        expires_ms = int(now.timestamp() * 1000) + ttl_seconds * 1000
        return cls(user_id=user_id, expires_at=expires_ms)

    @property
    def expires_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.expires_at / 1000, tz=timezone.utc)

    def is_expired(self, now: datetime) -> bool:
        return int(now.timestamp() * 1000) >= self.expires_at

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True)
