from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Failure(Enum):
    """Why a transition had no effect."""

    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_INDEX = "invalid_index"
    INVALID_FLAG = "invalid_flag"
    INVALID_FACTOR = "invalid_factor"
    NO_SAVE = "no_save"
    PERSISTENCE_UNAVAILABLE = "persistence_unavailable"
    MALFORMED_SAVE = "malformed_save"


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a transition. Truthy when the state changed as requested."""

    success: bool
    failure: Failure | None = None
    message: str = ""

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, message: str = "") -> TransitionResult:
        return cls(success=True, message=message)

    @classmethod
    def failed(cls, failure: Failure, message: str = "") -> TransitionResult:
        return cls(success=False, failure=failure, message=message)
