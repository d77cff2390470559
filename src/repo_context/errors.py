"""Discovery errors and structured warnings."""

from __future__ import annotations

from dataclasses import dataclass

NO_FILES_MATCHED = "NoFilesMatched"
TOKEN_BUDGET_TOO_SMALL = "TokenBudgetTooSmall"
SCAN_LIMIT_EXCEEDED = "ScanLimitExceeded"


class DiscoveryConfigError(ValueError):
    """Raised when discovery cannot start because of invalid input or configuration."""

    def __init__(
        self,
        *,
        field: str,
        value: object,
        reason: str,
        hint: str | None = None,
    ) -> None:
        super().__init__(reason)
        self.field = field
        self.value = value
        self.reason = reason
        self.hint = hint


class DiscoveryCancelledError(Exception):
    """Raised when a discovery run observes its cancellation token."""

    def __init__(self, stage: str) -> None:
        super().__init__(f"Discovery cancelled after {stage}.")
        self.stage = stage


@dataclass(slots=True, frozen=True)
class DiscoveryWarning:
    """Non-fatal condition reported alongside a result."""

    code: str
    message: str
    paths: tuple[str, ...] = ()
    count: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "code": self.code,
            "message": self.message,
            "paths": list(self.paths),
            "count": self.count,
        }
