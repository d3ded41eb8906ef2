"""ToolState and approval sentinel definitions."""

from enum import Enum
from typing import Literal

ToolState = Literal["input-streaming", "input-available", "output-available", "output-error"]


class Approval(str, Enum):
    """Decision tokens a client writes into a tool part's output.

    They stand in for a real result until the approval pass replaces them.
    """

    YES = "Yes, confirmed."
    NO = "No, denied."


def is_approval_sentinel(value: object) -> bool:
    """Check whether an output is one of the approval decision tokens."""
    return value == Approval.YES or value == Approval.NO
