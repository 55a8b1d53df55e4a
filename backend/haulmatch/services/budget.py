"""Wall-clock budget for one worker invocation."""

import time
from collections.abc import Callable


class WallClockBudget:
    """Tracks elapsed time against a fixed allowance.

    Checked only between units of work; a unit in flight always finishes.

    Args:
        seconds: Allowance for the invocation.
        clock: Monotonic clock returning seconds. Injectable for tests.
    """

    def __init__(
        self, seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._seconds = seconds
        self._clock = clock
        self._started = clock()

    @property
    def elapsed_seconds(self) -> float:
        return self._clock() - self._started

    @property
    def elapsed_ms(self) -> int:
        return int(self.elapsed_seconds * 1000)

    @property
    def remaining_seconds(self) -> float:
        return max(0.0, self._seconds - self.elapsed_seconds)

    def exhausted(self) -> bool:
        return self.elapsed_seconds >= self._seconds
