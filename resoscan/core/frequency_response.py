"""
Frequency Response Computation

Derives the magnitude response of a measured impulse response.

Pipeline:
1. Window the IR (e.g. 0-200 ms) with a half-Hann fade-out
2. FFT at the next power of two
3. Resample the magnitude onto a logarithmic frequency axis
4. Convert to dB (silence clamped to -120 dB)

Technical assumptions:
- Truncating the IR isolates direct sound and early reflections;
  the fade-out avoids spectral leakage from an abrupt cutoff
- Log-axis values are linearly interpolated between the two nearest bins
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .fft import fft, next_power_of_two, real_to_complex
from .signal_processing import magnitude_to_db


@dataclass(frozen=True)
class FrequencyPoint:
    """A single point on a frequency response curve."""
    freq: float  # Hz
    db: float    # Magnitude in dB (relative), always finite


def window_ir(
    ir: np.ndarray,
    sample_rate: float,
    max_duration_sec: Optional[float] = None,
    fade_out_ratio: float = 0.1,
) -> np.ndarray:
    """
    Truncate an IR and fade out its end with a half raised cosine.

    If max_duration_sec is None or longer than the IR, the full IR is used.

    Args:
        ir: Impulse response
        sample_rate: Sample rate in Hz
        max_duration_sec: Window duration in seconds
        fade_out_ratio: Fraction of the window used for the fade (weight 1 -> 0)

    Returns:
        New windowed array
    """
    ir = np.asarray(ir, dtype=np.float64)
    if max_duration_sec is not None:
        max_samples = min(int(round(max_duration_sec * sample_rate)), len(ir))
    else:
        max_samples = len(ir)
    max_samples = max(max_samples, 0)

    windowed = ir[:max_samples].copy()

    fade_len = int(round(max_samples * fade_out_ratio))
    if fade_len > 0:
        fade_start = max_samples - fade_len
        t = (np.arange(fade_start, max_samples) - fade_start) / fade_len  # 0 -> 1
        windowed[fade_start:] *= 0.5 * (1 + np.cos(np.pi * t))

    return windowed


def compute_magnitude_response(
    signal: np.ndarray,
    sample_rate: float,
    f_min: float,
    f_max: float,
    num_points: int,
) -> list[FrequencyPoint]:
    """
    Magnitude response on a logarithmic frequency axis.

    Technical details:
    - Signal zero-padded to the next power of two
    - Bins 0..N/2 (positive frequencies only)
    - num_points log-spaced frequencies from max(f_min, 1) to min(f_max, Nyquist)
    - 20*log10(magnitude), non-finite values clamped to -120 dB

    Args:
        signal: Time-domain signal (typically a windowed IR)
        sample_rate: Sample rate in Hz
        f_min: Lower frequency bound (Hz)
        f_max: Upper frequency bound (Hz)
        num_points: Number of output points

    Returns:
        List of FrequencyPoint, ascending by frequency
        (empty for an empty signal or num_points <= 0)
    """
    if len(signal) == 0 or num_points <= 0:
        return []

    n = next_power_of_two(len(signal))
    re, im = real_to_complex(signal, n)
    fft(re, im)

    half_n = n // 2
    magnitudes = np.hypot(re[:half_n + 1], im[:half_n + 1])

    log_f_min = np.log10(max(f_min, 1.0))
    log_f_max = np.log10(min(f_max, sample_rate / 2))
    bin_width = sample_rate / n

    freqs = np.logspace(log_f_min, log_f_max, num_points)

    # Linear interpolation between neighbouring bins, clamped at Nyquist
    mags = np.interp(freqs / bin_width, np.arange(len(magnitudes)), magnitudes)
    dbs = magnitude_to_db(mags)

    return [FrequencyPoint(freq=float(f), db=float(d)) for f, d in zip(freqs, dbs)]


def response_frequencies(points: Sequence[FrequencyPoint]) -> np.ndarray:
    """Frequency axis of a response as an array (Hz)."""
    return np.array([p.freq for p in points], dtype=np.float64)


def response_db(points: Sequence[FrequencyPoint]) -> np.ndarray:
    """Magnitude values of a response as an array (dB)."""
    return np.array([p.db for p in points], dtype=np.float64)
