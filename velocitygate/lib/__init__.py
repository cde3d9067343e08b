from velocitygate.lib.reaper import Reaper
from velocitygate.lib.signatures import BOT_SIGNATURES, is_suspicious_signal, match_signature
from velocitygate.lib.sliding_window import VelocityWindowStore
from velocitygate.lib.threat import VELOCITY_THRESHOLD, BlockReason, ThreatAnalyzer, Verdict

__all__ = [
    "BOT_SIGNATURES",
    "VELOCITY_THRESHOLD",
    "BlockReason",
    "Reaper",
    "ThreatAnalyzer",
    "Verdict",
    "VelocityWindowStore",
    "is_suspicious_signal",
    "match_signature",
]
