"""VelocityGate - in-process bot and request-velocity blocking."""

from velocitygate.lib.reaper import Reaper
from velocitygate.lib.signatures import is_suspicious_signal
from velocitygate.lib.sliding_window import VelocityWindowStore
from velocitygate.lib.threat import BlockReason, ThreatAnalyzer, Verdict

__all__ = [
    "BlockReason",
    "Reaper",
    "ThreatAnalyzer",
    "Verdict",
    "VelocityWindowStore",
    "is_suspicious_signal",
]
