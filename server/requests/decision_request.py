"""DecisionRequest model."""

from pydantic import BaseModel


class DecisionRequest(BaseModel):
    approved: bool
