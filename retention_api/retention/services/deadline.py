"""Overall time budget for one cleanup run."""

import time
from collections.abc import Callable


class Deadline:
    """Wall-clock budget shared by the orchestrator and the bucket cleaners.

    A ``None`` budget never expires.
    """

    def __init__(
        self, seconds: float | None, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._clock = clock
        self._expires_at = None if seconds is None else clock() + seconds

    @property
    def expired(self) -> bool:
        return self._expires_at is not None and self._clock() >= self._expires_at

    def remaining(self) -> float | None:
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())
