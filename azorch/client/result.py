"""
Typed results at the Azkaban client boundary.

Azkaban signals "this project name is taken" only through the message text
"Project already exists.". This module is the one place that text is
matched: classify() turns a client call into a CallResult tagged SUCCESS,
CONFLICT or FAILURE, and the producer branches on the tag.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from azorch.errors import AzkabanApiError

PROJECT_EXISTS_MESSAGE = "Project already exists."


class CallStatus(str, Enum):
    """Outcome of a single client call."""
    SUCCESS = "success"
    CONFLICT = "conflict"
    FAILURE = "failure"


@dataclass(frozen=True)
class CallResult:
    """
    Result of a client call.

    Attributes:
        status: SUCCESS, CONFLICT or FAILURE
        value: Return value of the call (SUCCESS only)
        error: The AzkabanApiError raised by the call (CONFLICT, FAILURE)
    """
    status: CallStatus
    value: Any = None
    error: Optional[AzkabanApiError] = None

    @property
    def ok(self) -> bool:
        return self.status is CallStatus.SUCCESS


def is_project_exists(error: AzkabanApiError) -> bool:
    """True if the error is Azkaban's "Project already exists." answer (any case)."""
    return (error.message or "").lower() == PROJECT_EXISTS_MESSAGE.lower()


def classify(call: Callable[[], Any]) -> CallResult:
    """
    Run a client call and tag its outcome.

    Only AzkabanApiError is classified; anything else propagates.
    """
    try:
        value = call()
    except AzkabanApiError as e:
        if is_project_exists(e):
            return CallResult(CallStatus.CONFLICT, error=e)
        return CallResult(CallStatus.FAILURE, error=e)
    return CallResult(CallStatus.SUCCESS, value=value)
