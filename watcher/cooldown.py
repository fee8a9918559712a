# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""Threshold test and cooldown gate shared by the three watchers."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Threshold:
    """value > limit, or value >= limit when inclusive."""
    limit: float
    inclusive: bool = False

    def exceeded(self, value: float) -> bool:
        if self.inclusive:
            return value >= self.limit
        return value > self.limit


class CooldownGate:
    """
    At most one trigger per cooldown window.

    The first trigger always passes. After that, a trigger passes once
    `seconds` have elapsed since the previous one (elapsed == seconds passes).
    """

    def __init__(self, seconds: float):
        self.seconds = seconds
        self.last_fired: Optional[float] = None

    def remaining(self, now: float) -> float:
        if self.last_fired is None:
            return 0.0
        return max(0.0, self.seconds - (now - self.last_fired))

    def ready(self, now: float) -> bool:
        return self.last_fired is None or now - self.last_fired >= self.seconds

    def cooling(self, now: float) -> bool:
        return not self.ready(now)

    def try_acquire(self, now: float) -> bool:
        """Claim the gate. Returns False (and changes nothing) while cooling down."""
        if not self.ready(now):
            return False
        self.last_fired = now
        return True

    def reset(self) -> None:
        self.last_fired = None
