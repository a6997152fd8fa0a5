"""
Polling and retry helpers for wait-for-completion steps.
"""

from .strategies import PollConfig, is_present, poll_until

__all__ = [
    "PollConfig",
    "is_present",
    "poll_until",
]
