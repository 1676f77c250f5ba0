"""
Pydantic models for the breathing phase and application configuration.
Provides clamping for the phase duration and validation for all other settings.
"""

import math

from pydantic import BaseModel, Field, field_validator

MIN_PHASE_DURATION = 1.0
MAX_PHASE_DURATION = 10.0
DEFAULT_PHASE_DURATION = 4.0
PHASE_STORAGE_KEY = "breathe-phase-duration"

DEFAULT_CACHE_VERSION = "breathe-cache-v1"
DEFAULT_ORIGIN = "http://localhost:3000"
DEFAULT_PRECACHE_URLS = [
    "/",
    "/manifest.json",
    "/icon-192x192.svg",
    "/icon-512x512.svg",
]


def clamp_phase_duration(value: float) -> float:
    """Clamps a duration to the allowed range and rounds it to a tenth of a second."""
    clamped = min(MAX_PHASE_DURATION, max(MIN_PHASE_DURATION, float(value)))
    return round(clamped, 1)


def parse_phase_duration(raw: str | None) -> float | None:
    """
    Parses a persisted phase duration.

    Returns:
        The clamped duration, or None if the value is empty, non-numeric or not finite.
    """
    if not raw or not raw.strip():
        return None
    try:
        parsed = float(raw)
    except ValueError:
        return None
    if not math.isfinite(parsed):
        return None
    return clamp_phase_duration(parsed)


class PhaseConfig(BaseModel):
    """The configured length of each of the four breathing phases."""

    phase_duration_seconds: float = DEFAULT_PHASE_DURATION

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True

    @field_validator("phase_duration_seconds")
    @classmethod
    def clamp_duration(cls, v: float) -> float:
        """Keeps the duration within [1.0, 10.0] at 0.1 granularity."""
        if math.isnan(v):
            raise ValueError("Phase duration must be a number.")
        return clamp_phase_duration(v)

    @property
    def phase_ms(self) -> float:
        return self.phase_duration_seconds * 1000

    def serialize(self) -> str:
        """Returns the duration with exactly one fractional digit, e.g. '4.0'."""
        return f"{self.phase_duration_seconds:.1f}"


class AppConfig(BaseModel):
    """A validated configuration model for the application."""

    # Offline cache
    cache_version: str = DEFAULT_CACHE_VERSION
    origin: str = DEFAULT_ORIGIN
    precache_urls: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PRECACHE_URLS)
    )
    network_timeout: float = 30.0

    # Timer
    sample_interval_ms: int = 100
    default_phase_duration: float = DEFAULT_PHASE_DURATION

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("cache_version")
    @classmethod
    def validate_cache_version(cls, v: str) -> str:
        if not v:
            raise ValueError("Cache version cannot be empty.")
        return v

    @field_validator("origin")
    @classmethod
    def validate_origin(cls, v: str) -> str:
        """Ensures the origin is an absolute http(s) URL without a trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Origin must be an http(s) URL, but got: {v}")
        return v.rstrip("/")

    @field_validator("precache_urls")
    @classmethod
    def validate_precache_urls(cls, v: list[str]) -> list[str]:
        if "/" not in v:
            raise ValueError(
                "The precache manifest must include the root document '/'."
            )
        return v

    @field_validator("network_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Network timeout must be positive.")
        return v

    @field_validator("sample_interval_ms")
    @classmethod
    def validate_interval(cls, v: int) -> int:
        if v < 10 or v > 1000:
            raise ValueError("Sample interval must be between 10 and 1000 ms.")
        return v

    @field_validator("default_phase_duration")
    @classmethod
    def validate_default_duration(cls, v: float) -> float:
        return clamp_phase_duration(v)

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        return set(cls.model_fields)
