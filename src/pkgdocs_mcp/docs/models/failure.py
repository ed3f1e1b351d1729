"""Per-source failure records accumulated by the source chain."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class FailureKind(Enum):
    TIMEOUT = "timeout"
    COMMAND_FAILED = "command_failed"
    HTTP_ERROR = "http_error"
    NOT_FOUND = "not_found"
    PARSE_ERROR = "parse_error"
    EMPTY = "empty"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class SourceFailure:
    """Why one fetch strategy did not yield content."""

    source: str
    kind: FailureKind
    message: str
    elapsed_s: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "kind": self.kind.value,
            "message": self.message,
            "elapsed_s": round(self.elapsed_s, 3),
        }
