from __future__ import annotations

from dataclasses import dataclass

from commute_router.domain.exceptions import SearchCancelled


@dataclass(slots=True)
class CancellationToken:
    """Caller-owned flag checked before each provider or feed call.

    A newer query can cancel the token of the one it supersedes; the search
    then stops at its next suspension point with SearchCancelled.
    """

    cancelled: bool = False
    reason: str | None = None

    def cancel(self, reason: str | None = None) -> None:
        self.cancelled = True
        self.reason = reason

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise SearchCancelled(self.reason or "Search cancelled")
