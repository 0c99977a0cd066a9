"""Rate-limited upload progress reporting."""

import time
from typing import Callable, Optional

from common.constants import DEFAULT_PROGRESS_INTERVAL_SECONDS, MEGABYTE

ProgressCallback = Callable[[float, float], None]


class ProgressReporter:
    """
    Tracks bytes sent for one transfer and reports to a callback.

    The callback receives (percent_complete, speed_mbs) at most once per
    interval, where speed is bytes since the previous report divided by
    the wall time since the previous report. A final 100% report is
    emitted by finish() if the last report was below 100.
    """

    def __init__(
        self,
        total_size: int,
        callback: Optional[ProgressCallback],
        interval: float = DEFAULT_PROGRESS_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            total_size: Total bytes expected
            callback: Called with (percent_complete, speed_mbs); None disables reporting
            interval: Minimum seconds between two reports
            clock: Monotonic time source
        """
        self.total_size = total_size
        self.callback = callback
        self.interval = interval
        self._clock = clock
        self._transferred = 0
        self._last_time = clock()
        self._last_bytes = 0
        self._last_percent = -1.0

    @property
    def transferred(self) -> int:
        return self._transferred

    @property
    def percent(self) -> float:
        if self.total_size <= 0:
            return 100.0
        return min(100.0, self._transferred * 100.0 / self.total_size)

    def update(self, num_bytes: int) -> None:
        self._transferred += num_bytes
        if self.callback is None:
            return
        if self._clock() - self._last_time >= self.interval:
            self._report()

    def finish(self) -> None:
        if self.callback is not None and self._last_percent < 100.0:
            self._report()

    def _report(self) -> None:
        now = self._clock()
        elapsed = now - self._last_time
        sent = self._transferred - self._last_bytes
        speed = sent / elapsed / MEGABYTE if elapsed > 0 else 0.0

        self._last_time = now
        self._last_bytes = self._transferred
        self._last_percent = self.percent
        self.callback(self._last_percent, speed)
