"""Threat analysis combining signature matching and request velocity.

Requests are checked in two stages, stopping at the first hit:

1. Signature detection against the user-agent. Requests rejected here are not
   counted toward the client's velocity.
2. Velocity analysis: more than ``VELOCITY_THRESHOLD`` requests from one
   client key inside the sliding window is an anomaly. A blank key cannot be
   tracked and passes this stage.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from velocitygate.lib.signatures import match_signature
from velocitygate.lib.sliding_window import VelocityWindowStore

VELOCITY_THRESHOLD = 50


class BlockReason(enum.Enum):
    MISSING_SIGNAL = "missing_signal"
    SIGNATURE = "signature"
    VELOCITY = "velocity"


@dataclass(frozen=True)
class Verdict:
    """Outcome of a single threat assessment."""

    blocked: bool
    reason: BlockReason | None = None
    signature: str | None = None
    velocity: int = 0


ALLOWED = Verdict(blocked=False)


class ThreatAnalyzer:
    """Decides whether a request should be blocked.

    Args:
        store: Velocity store owned by this analyzer.
    """

    def __init__(self, store: VelocityWindowStore) -> None:
        self.store = store

    def evaluate(self, key: str | None, signal: str | None) -> Verdict:
        """Assess a request and explain the decision."""
        if not signal or signal.isspace():
            return Verdict(blocked=True, reason=BlockReason.MISSING_SIGNAL)

        token = match_signature(signal)
        if token is not None:
            return Verdict(blocked=True, reason=BlockReason.SIGNATURE, signature=token)

        if not key or key.isspace():
            return ALLOWED

        count = self.store.record_and_count(key)
        if count > VELOCITY_THRESHOLD:
            return Verdict(blocked=True, reason=BlockReason.VELOCITY, velocity=count)
        return Verdict(blocked=False, velocity=count)

    def classify(self, key: str | None, signal: str | None) -> bool:
        """Return True if the request should be blocked."""
        return self.evaluate(key, signal).blocked

    def get_current_velocity(self, key: str | None) -> int:
        return self.store.current_count(key)

    def tracked_key_count(self) -> int:
        return self.store.tracked_key_count()

    def reset_cache(self) -> None:
        """Clear all velocity data. Intended for tests and administration."""
        self.store.reset()
