import time
from typing import Any, Callable, Optional


class Timer:
    """Stopwatch on a monotonic high-resolution clock, used to pace the cycle loop."""

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self.start_time: Optional[float] = None
        self.elapsed_time: float = 0.0
        self.running: bool = False
        self._clock = clock

    def start(self) -> None:
        if not self.running:
            self.start_time = self._clock()
            self.running = True

    def stop(self) -> None:
        if self.running:
            assert self.start_time is not None
            self.elapsed_time += self._clock() - self.start_time
            self.start_time = None
            self.running = False

    def get_elapsed_time(self) -> float:
        """Elapsed seconds, including the current run if started."""
        if self.running:
            assert self.start_time is not None
            return self.elapsed_time + (self._clock() - self.start_time)
        return self.elapsed_time

    def reset(self) -> None:
        self.start_time = None
        self.elapsed_time = 0.0
        self.running = False

    def restart(self) -> None:
        self.reset()
        self.start()

    def remaining(self, period: float) -> float:
        """Seconds left until ``period`` has elapsed, never negative."""
        return max(0.0, period - self.get_elapsed_time())

    def is_running(self) -> bool:
        return self.running

    def __str__(self) -> str:
        state = "running" if self.running else "stopped"
        return f"Timer({state}, {self.get_elapsed_time():.4f}s)"

    def __repr__(self) -> str:
        return f"Timer(running={self.running}, elapsed_time={self.elapsed_time:.6f}, start_time={self.start_time})"

    def __format__(self, format_spec: str) -> str:
        return format(self.get_elapsed_time(), format_spec)

    def __call__(self) -> float:
        return self.get_elapsed_time()

    def __enter__(self) -> "Timer":
        self.start()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.stop()


def pace(timer: Timer, period: float, sleep: Callable[[float], None] = time.sleep) -> None:
    """Sleep out whatever is left of ``period`` since ``timer`` was started, then restart it."""
    wait = timer.remaining(period)
    if wait > 0:
        sleep(wait)
    timer.restart()
