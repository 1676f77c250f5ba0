"""breathe: a guided box-breathing timer with an offline app shell cache."""

__version__ = "0.3.0"
