"""ChatRequest model."""

from pydantic import BaseModel

from core import Message


class ChatRequest(BaseModel):
    id: str | None = None
    messages: list[Message] | None = None  # full conversation, replaces the stored one
    text: str | None = None  # appended as a new user message
