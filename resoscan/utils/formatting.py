"""
Formatting functions for display.

Converts numeric measurement values into readable strings.
"""

from typing import Optional


def format_frequency(hz: float) -> str:
    """
    Format frequency in readable form.

    Args:
        hz: Frequency in Hz

    Returns:
        Formatted string (e.g. "1.5 kHz" or "250 Hz")
    """
    if hz >= 1000:
        return f"{hz/1000:.1f} kHz"
    else:
        return f"{hz:.0f} Hz"


def format_db(db: float, precision: int = 1) -> str:
    """
    Format a dB value.

    Args:
        db: Level in dB
        precision: Decimal places

    Returns:
        Formatted string (e.g. "-12.3 dB")
    """
    if db == float('-inf'):
        return "-∞ dB"
    return f"{db:.{precision}f} dB"


def format_duration(seconds: float) -> str:
    """
    Format a duration for display.

    Returns:
        "123 ms" below one second, otherwise "2.35 s"
    """
    if seconds < 1:
        return f"{round(seconds * 1000)} ms"
    return f"{seconds:.2f} s"


def format_sample_rate(sr: Optional[int]) -> str:
    """
    Format sample rate.

    Args:
        sr: Sample rate in Hz, None if unknown

    Returns:
        Formatted string (e.g. "44.1 kHz", "48 kHz" or "Unknown")
    """
    if sr is None:
        return "Unknown"
    if sr < 1000:
        return f"{sr} Hz"
    if sr % 1000 == 0:
        return f"{sr // 1000} kHz"
    else:
        return f"{sr / 1000:.1f} kHz"


def format_rt60(rt60: Optional[float]) -> str:
    """Format a reverberation time, "n/a" when no estimate exists."""
    if rt60 is None:
        return "n/a"
    return format_duration(rt60)
