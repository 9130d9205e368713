"""
Simulation Clock Module

Tracks accumulated simulation time under a user-controlled rate multiplier
and pause flag. The host calls tick() once per frame with the real elapsed
time and applies the returned simulation day-delta.
"""

import math


SECONDS_PER_DAY = 86400.0


def rate_from_slider(value: float) -> float:
    """
    Map a logarithmic slider value to a rate multiplier

    10^v for v >= 0 and 1 / 10^|v| for v < 0, so v = 0 is exactly real time.
    """
    if not math.isfinite(value):
        raise ValueError(f"Slider value must be finite, got {value}")
    if value < 0:
        return 1 / math.pow(10, abs(value))
    return math.pow(10, value)


def rate_label(rate: float) -> str:
    """Human-readable description of a rate multiplier"""
    if rate == 1:
        return "Real-time"
    if rate > 1:
        return f"{rate:.0f}x faster"
    return f"{1 / rate:.2f}x slower"


class SimulationClock:
    """
    Accumulated simulation time with a rate multiplier and pause flag.

    accumulated_days starts at 0 and only moves forward; there is no reset.
    """

    def __init__(self, rate_multiplier: float = 1.0, paused: bool = False):
        """
        Initialize clock

        Args:
            rate_multiplier: Simulation seconds per real second (> 0)
            paused: Start paused
        """
        self.accumulated_days = 0.0
        self._rate_multiplier = 1.0
        self.rate_multiplier = rate_multiplier
        self.paused = paused

    @property
    def rate_multiplier(self) -> float:
        return self._rate_multiplier

    @rate_multiplier.setter
    def rate_multiplier(self, value: float):
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"Rate multiplier must be positive and finite, got {value}")
        self._rate_multiplier = float(value)

    def set_rate_from_slider(self, value: float) -> float:
        """Set the rate multiplier from a logarithmic slider value; returns the new rate"""
        self.rate_multiplier = rate_from_slider(value)
        return self.rate_multiplier

    def toggle_pause(self) -> bool:
        self.paused = not self.paused
        return self.paused

    def tick(self, real_delta_seconds: float) -> float:
        """
        Advance the clock by one frame

        Args:
            real_delta_seconds: Real time since the previous frame

        Returns:
            Simulation days to apply this frame (0 while paused)
        """
        if not math.isfinite(real_delta_seconds) or real_delta_seconds < 0:
            raise ValueError(f"Frame delta must be a non-negative finite number, got {real_delta_seconds}")
        if self.paused:
            return 0.0

        days = real_delta_seconds / SECONDS_PER_DAY * self._rate_multiplier
        self.accumulated_days += days
        return days

    def advance_days(self, days: float) -> float:
        """Jump forward by a number of simulation days, ignoring rate and pause"""
        if not math.isfinite(days) or days < 0:
            raise ValueError(f"Cannot advance the clock by {days} days")
        self.accumulated_days += days
        return self.accumulated_days

    def __repr__(self) -> str:
        return (f"SimulationClock(accumulated_days={self.accumulated_days!r}, "
                f"rate_multiplier={self._rate_multiplier!r}, paused={self.paused!r})")
