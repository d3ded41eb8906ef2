"""AgentConfig model."""

from pydantic import BaseModel, Field


class AgentConfig(BaseModel):
    """Per-agent overrides."""

    model: str | None = Field(default=None, description="Model override for this agent")
    system_prompt: str | None = Field(default=None, description="Custom system prompt")
    max_steps: int | None = Field(
        default=None, ge=1, description="Model request budget per turn override"
    )
