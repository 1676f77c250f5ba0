"""
Helper functions for formatting data into human-readable strings.
"""


def format_elapsed(ms: float) -> str:
    """Formats a session time in milliseconds as 'm:ss' (e.g. '3:07', '12:00')."""
    total_seconds = int(max(0.0, ms) // 1000)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"


def format_phase_duration(seconds: float) -> str:
    """Formats a phase duration with one decimal, e.g. '4.0s'."""
    return f"{seconds:.1f}s"


def format_size(bytes_size: int) -> str:
    """Formats bytes into a human-readable size string (e.g., '14.2 KB')."""
    if bytes_size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    size = float(bytes_size)
    i = 0
    while size >= 1024 and i < len(units) - 1:
        size /= 1024
        i += 1
    return f"{size:.1f} {units[i]}"


def format_duration(seconds: float) -> str:
    """
    Formats a duration in seconds into a human-readable string (e.g., '1h 4m 12s').
    """
    s = int(seconds)
    hours, remainder = divmod(s, 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)
