"""
Session Module - One trial's worth of state.

A trial:
- Owns its entropy source and TrialContext exclusively
- Runs to completion or to its first fatal failure
- Is reported as a TrialResult
"""

from .context import TrialContext
from .runner import TrialResult, classify_failure, run_trial

__all__ = [
    "TrialContext",
    "TrialResult",
    "classify_failure",
    "run_trial",
]
