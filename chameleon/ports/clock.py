from typing import Protocol


class ClockPort(Protocol):
    def monotonic(self) -> float:
        """Seconds from an arbitrary, never-decreasing origin."""
        ...
