"""Data models for buddychat.

These models define the structure of chat messages and session settings,
independent of the storage backend and the renderer used.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator
from uuid_extensions import uuid7

from .config import (
    CLEAR_GREETING_DELAY,
    PLACEHOLDER_ID,
    RESPONSE_DELAY_MAX,
    RESPONSE_DELAY_MIN,
    REVEAL_TICK_INTERVAL,
)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime with millisecond precision."""
    return _to_millis(datetime.now(UTC))


def _to_millis(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def new_message_id() -> str:
    """Generate a time-ordered unique message id."""
    return str(uuid7())


class Author(str, Enum):
    """Who wrote a message."""

    USER = "user"
    ASSISTANT = "assistant"


class SessionState(str, Enum):
    """Lifecycle state of a session controller."""

    IDLE = "idle"          # No request in flight, input accepted
    AWAITING = "awaiting"  # Waiting on the response generator


class Message(BaseModel):
    """A single chat message.

    Messages are immutable; the only mutation the session performs is
    replacing a placeholder with the final reply at the same position.
    """

    id: str = Field(default_factory=new_message_id, description="Unique message id")
    text: str = Field(description="Message text")
    author: Author = Field(description="Message author")
    timestamp: datetime = Field(default_factory=utc_now, description="Creation time (UTC)")
    placeholder: bool = Field(
        default=False,
        description="True only for an in-flight assistant reply"
    )

    model_config = {"frozen": True}

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return _to_millis(value)

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    @property
    def is_user(self) -> bool:
        return self.author == Author.USER

    @classmethod
    def from_user(cls, text: str) -> "Message":
        """Create a user-authored message."""
        return cls(text=text, author=Author.USER)

    @classmethod
    def from_assistant(cls, text: str) -> "Message":
        """Create a finalized assistant message."""
        return cls(text=text, author=Author.ASSISTANT)

    @classmethod
    def pending(cls) -> "Message":
        """Create the placeholder marking an in-flight assistant reply."""
        return cls(id=PLACEHOLDER_ID, text="", author=Author.ASSISTANT, placeholder=True)


class SessionSettings(BaseModel):
    """Timing and randomness settings for a session."""

    tick_interval: float = Field(
        default=REVEAL_TICK_INTERVAL,
        gt=0,
        description="Seconds between reveal ticks"
    )
    clear_greeting_delay: float = Field(
        default=CLEAR_GREETING_DELAY,
        ge=0,
        description="Seconds before the greeting appears after a clear"
    )
    delay_min: float = Field(
        default=RESPONSE_DELAY_MIN,
        ge=0,
        description="Minimum simulated response delay in seconds"
    )
    delay_max: float = Field(
        default=RESPONSE_DELAY_MAX,
        ge=0,
        description="Maximum simulated response delay in seconds"
    )
    seed: int | None = Field(
        default=None,
        description="Seed for the response generator's random source"
    )

    @model_validator(mode="after")
    def _check_delay_range(self) -> "SessionSettings":
        if self.delay_min > self.delay_max:
            raise ValueError(
                f"delay_min ({self.delay_min}) must not exceed delay_max ({self.delay_max})"
            )
        return self
