"""
Change tracking and the interactive watch loop.
"""

from thisismy.watch.fingerprint import FingerprintStore, fingerprint, has_changed
from thisismy.watch.gate import ConfirmationGate, Decision, interpret_response
from thisismy.watch.session import (
    DEFAULT_INTERVAL_MINUTES,
    ChangeEvent,
    LineReader,
    SessionState,
    WatchSession,
)

__all__ = [
    "DEFAULT_INTERVAL_MINUTES",
    "ChangeEvent",
    "ConfirmationGate",
    "Decision",
    "FingerprintStore",
    "LineReader",
    "SessionState",
    "WatchSession",
    "fingerprint",
    "has_changed",
    "interpret_response",
]
