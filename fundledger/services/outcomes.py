"""Structured results of posting operations.

Business-rule rejections (e.g. insufficient funds) depend on current
ledger state rather than on the input, so they are returned as a
``PostingResult`` with ``ok=False`` instead of being raised. The UI
renders the attached ``Notice`` inline.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class Notice:
    """User-facing message attached to an outcome."""

    level: NoticeLevel
    message: str
    description: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "level": self.level.value,
            "message": self.message,
            "description": self.description,
        }


@dataclass
class PostingResult:
    """Outcome of a posting or status change."""

    ok: bool
    notice: Notice
    transactions: list[Any] = field(default_factory=list)
    reimbursement_request: Any = None

    @classmethod
    def rejected(cls, message: str, description: str) -> "PostingResult":
        """Soft failure: nothing was written."""
        return cls(ok=False, notice=Notice(NoticeLevel.WARNING, message, description))


__all__ = ["NoticeLevel", "Notice", "PostingResult"]
