"""Results of processed jobs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ResultStatus(str, Enum):
    """Known result statuses."""

    SUCCESS = "success"
    FAILURE = "failure"
    PERMANENT_FAILURE = "permanent-failure"
    INTERNAL_FAILURE = "internal-failure"


@dataclass
class Result:
    """The outcome of a processed job."""

    status: str = ""
    code: int = 0
    message: str = ""

    def __post_init__(self) -> None:
        if isinstance(self.status, ResultStatus):
            self.status = self.status.value

    def is_success(self) -> bool:
        """Return whether the job succeeded."""
        return self.status == ResultStatus.SUCCESS.value

    def is_failure(self) -> bool:
        """Return whether the job did not succeed."""
        return self.status != ResultStatus.SUCCESS.value

    def is_permanent_failure(self) -> bool:
        """Return whether the job failed and must not be retried."""
        return self.status == ResultStatus.PERMANENT_FAILURE.value

    def is_finished(self) -> bool:
        """Return whether the job needs no further tries."""
        return self.status in (ResultStatus.SUCCESS.value, ResultStatus.PERMANENT_FAILURE.value)

    def is_valid(self) -> bool:
        """Return whether the status may be reported by a worker."""
        return self.status in (
            ResultStatus.SUCCESS.value,
            ResultStatus.FAILURE.value,
            ResultStatus.PERMANENT_FAILURE.value,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the result as a JSON-ready dictionary."""
        return {"status": self.status, "code": self.code, "message": self.message}