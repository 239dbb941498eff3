"""
General Signal Processing

Level measurement and buffer helpers shared by the measurement pipeline.
All functions are EXPLICIT - no automatic conversions.

Technical assumptions:
- Resampling uses scipy.signal.resample_poly for anti-aliasing
- Downmix is performed as arithmetic mean (no energy compensation)
- All operations work on copies, original data remains unchanged
- dB values are referenced to full scale (1.0)
"""

from dataclasses import dataclass
from typing import Literal, Sequence

import numpy as np
from scipy import signal


# Absolute sample value at or above which a sample counts as clipped.
# Slightly below 1.0 to catch near-clips too.
CLIPPING_THRESHOLD = 0.99

# Floor used wherever a level in dB would be -inf
SILENCE_DB = -120.0


@dataclass
class ClippingResult:
    """Result of clipping detection on a buffer."""
    clipped: bool
    clipped_sample_count: int
    peak: float


def linear_to_db(value: float) -> float:
    """Convert a linear magnitude to dB (-inf for values <= 0)."""
    if value <= 0:
        return -np.inf
    return 20 * np.log10(value)


def db_to_linear(db: float) -> float:
    """Convert dB to a linear magnitude."""
    return 10 ** (db / 20)


def magnitude_to_db(magnitude: np.ndarray, floor_db: float = SILENCE_DB) -> np.ndarray:
    """
    Vectorised 20*log10 with a finite floor.

    Zero (or otherwise non-finite) levels are replaced by floor_db,
    so the result never contains -inf or NaN.
    """
    magnitude = np.asarray(magnitude, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        db = 20 * np.log10(magnitude)
    return np.where(np.isfinite(db), db, floor_db)


def compute_rms(data: np.ndarray, as_db: bool = False) -> float:
    """
    Compute RMS (Root Mean Square) of the signal.

    Args:
        data: Audio data
        as_db: If True, return in dB (reference: 1.0)

    Returns:
        RMS value (linear or dB), 0.0 (or -inf dB) for an empty buffer
    """
    rms = float(np.sqrt(np.mean(np.square(data)))) if len(data) else 0.0

    if as_db:
        return linear_to_db(rms)

    return rms


def compute_peak(data: np.ndarray, as_db: bool = False) -> float:
    """
    Compute peak value (absolute maximum) of the signal.

    Args:
        data: Audio data
        as_db: If True, return in dB (reference: 1.0)

    Returns:
        Peak value (linear or dB), 0.0 (or -inf dB) for an empty buffer
    """
    peak = float(np.max(np.abs(data))) if len(data) else 0.0

    if as_db:
        return linear_to_db(peak)

    return peak


def detect_clipping(
    data: np.ndarray,
    threshold: float = CLIPPING_THRESHOLD,
) -> ClippingResult:
    """
    Detect clipped samples (|sample| >= threshold).

    A clipped recording still yields an impulse response, but the
    harmonic distortion smears into the result; callers should report it.
    """
    magnitude = np.abs(np.asarray(data, dtype=np.float64))
    count = int(np.count_nonzero(magnitude >= threshold))
    peak = float(np.max(magnitude)) if len(magnitude) else 0.0
    return ClippingResult(clipped=count > 0, clipped_sample_count=count, peak=peak)


def concat_chunks(chunks: Sequence[np.ndarray]) -> np.ndarray:
    """Concatenate captured chunks into one buffer (empty for no chunks)."""
    if len(chunks) == 0:
        return np.zeros(0, dtype=np.float64)
    return np.concatenate([np.asarray(c, dtype=np.float64) for c in chunks])


def downsample_for_waveform(data: np.ndarray, num_bars: int) -> np.ndarray:
    """
    Reduce a buffer to num_bars peak values for a waveform preview.

    Each bar is the absolute peak of its window of samples.
    """
    if len(data) == 0 or num_bars <= 0:
        return np.zeros(0, dtype=np.float64)

    magnitude = np.abs(np.asarray(data, dtype=np.float64))
    samples_per_bar = len(magnitude) / num_bars
    bars = np.zeros(num_bars, dtype=np.float64)

    for i in range(num_bars):
        start = int(np.floor(i * samples_per_bar))
        end = min(int(np.floor((i + 1) * samples_per_bar)), len(magnitude))
        if end > start:
            bars[i] = np.max(magnitude[start:end])

    return bars


def resample_audio(
    data: np.ndarray,
    original_sr: int,
    target_sr: int,
) -> np.ndarray:
    """
    Resample mono audio data to a new sample rate.

    Uses scipy.signal.resample_poly with automatic anti-aliasing filtering.

    Technical details:
    - Polyphase resampling for efficient computation
    - Anti-aliasing filter: Kaiser window FIR

    Args:
        data: Audio data (1D)
        original_sr: Original sample rate
        target_sr: Target sample rate

    Returns:
        Resampled audio data
    """
    if original_sr == target_sr:
        return np.array(data, dtype=np.float64, copy=True)

    gcd = np.gcd(int(original_sr), int(target_sr))
    up = int(target_sr) // gcd
    down = int(original_sr) // gcd

    return signal.resample_poly(data, up, down).astype(np.float64)


def downmix_to_mono(
    data: np.ndarray,
    method: Literal["average", "first"] = "average",
) -> np.ndarray:
    """
    Convert multi-channel audio to mono.

    NO automatic downmix - this function must be called explicitly.

    Methods:
    - average: Mean over all channels, no energy compensation
    - first: First channel only (e.g. a measurement mic on input 1)

    Args:
        data: Audio data, Shape: (samples,) or (samples, channels)
        method: Downmix method

    Returns:
        Mono audio data, Shape: (samples,)
    """
    if data.ndim == 1:
        return data.copy()  # Already mono

    if data.ndim != 2:
        raise ValueError(f"Audio array must be 1D or 2D, got {data.ndim}D")

    if method == "average":
        return np.mean(data, axis=1)
    elif method == "first":
        return data[:, 0].copy()
    else:
        raise ValueError(f"Unknown method: {method}")
