"""
Presence signal conditioning: debouncing and hysteresis confirmation.
"""

from .debounce import Debouncer
from .confirmation import ConfirmationConfig, ConfirmationFilter, Observation

__all__ = [
    "Debouncer",
    "ConfirmationConfig",
    "ConfirmationFilter",
    "Observation",
]
