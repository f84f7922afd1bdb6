"""
Testing module for Interview Caller.

Contains sample inputs and pytest suites; nothing here talks to a real
provider or database.
"""

from testing.sample_inputs import (
    SAMPLE_SCRIPT,
    get_sample_candidates,
    get_sample_config,
)

__all__ = [
    "SAMPLE_SCRIPT",
    "get_sample_candidates",
    "get_sample_config",
]
