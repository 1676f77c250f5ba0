"""
Data Models Layer.

This package contains the Pydantic models and dataclasses that define the core
data structures used throughout the application, such as configuration, timer
state and HTTP values.
"""

from .config import AppConfig, PhaseConfig
from .http import Request, Response, ResponseType
from .stats import FetchSource, FetchStats, SessionStats
from .timer import Phase, PhaseSample, TimerState

__all__ = [
    "AppConfig",
    "FetchSource",
    "FetchStats",
    "Phase",
    "PhaseConfig",
    "PhaseSample",
    "Request",
    "Response",
    "ResponseType",
    "SessionStats",
    "TimerState",
]
