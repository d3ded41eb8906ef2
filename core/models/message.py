"""Message models."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from .part import Part


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MessageMetadata(BaseModel):
    createdAt: datetime = Field(default_factory=_now)


class Message(BaseModel):
    id: str
    role: Literal["user", "assistant", "system"]
    parts: list[Part] = Field(default_factory=list)
    metadata: MessageMetadata = Field(default_factory=MessageMetadata)
