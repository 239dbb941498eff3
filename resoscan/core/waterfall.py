"""
Cumulative Spectral Decay (Waterfall)

Magnitude spectra of an impulse response at successive time offsets,
showing how each frequency decays over time.

Technical assumptions:
- One FFT size for all slices (next power of two >= analysis window)
- Each slice analyses the IR from its offset to the end of the window
- First half of each segment unweighted, second half a half-Hann taper
  to zero at the segment end
- Logarithmic frequency axis shared by all slices
- Levels in dB relative to full scale, normalised by the FFT size
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .fft import fft, next_power_of_two, real_to_complex
from .signal_processing import SILENCE_DB, magnitude_to_db


@dataclass(frozen=True)
class WaterfallConfig:
    """
    Configuration for waterfall computation.

    Attributes:
        num_slices: Number of time slices
        window_sec: Total analysed time span in seconds
        num_freq_points: Points on the logarithmic frequency axis
        f_min: Lowest frequency in Hz
        f_max: Highest frequency in Hz
    """
    num_slices: int = 30
    window_sec: float = 0.3
    num_freq_points: int = 200
    f_min: float = 20.0
    f_max: float = 15000.0

    def __post_init__(self):
        """Validation."""
        if self.num_slices < 1:
            raise ValueError("num_slices must be at least 1")
        if self.window_sec <= 0:
            raise ValueError("window_sec must be positive")
        if self.num_freq_points < 2:
            raise ValueError("num_freq_points must be at least 2")
        if not 0 < self.f_min < self.f_max:
            raise ValueError(f"Require 0 < f_min < f_max, got f_min={self.f_min}, f_max={self.f_max}")

    @property
    def time_resolution(self) -> float:
        """Nominal spacing between slices in seconds."""
        return self.window_sec / self.num_slices


@dataclass
class WaterfallSlice:
    """Spectrum of the IR from time_sec onwards."""
    time_sec: float
    magnitude_db: np.ndarray = field(repr=False)


@dataclass
class WaterfallData:
    """
    Result of a waterfall computation.

    Attributes:
        slices: Slices with strictly increasing time offsets
        frequencies: Frequency axis in Hz, shared by all slices
        max_db: Highest level across all slices (for colour/axis scaling)
    """
    slices: list[WaterfallSlice]
    frequencies: np.ndarray
    max_db: float

    def as_matrix(self) -> np.ndarray:
        """Levels as a (slices, frequencies) array."""
        if not self.slices:
            return np.zeros((0, len(self.frequencies)))
        return np.vstack([s.magnitude_db for s in self.slices])

    @property
    def times(self) -> np.ndarray:
        """Time offsets of the slices in seconds."""
        return np.array([s.time_sec for s in self.slices], dtype=np.float64)


def compute_waterfall(
    ir: np.ndarray,
    sample_rate: float,
    config: Optional[WaterfallConfig] = None,
) -> WaterfallData:
    """
    Compute the cumulative spectral decay of an impulse response.

    Fewer than num_slices slices are returned when the IR is too short:
    slices without samples are dropped, as are slices whose rounded
    offset repeats the previous one.

    Args:
        ir: Impulse response (peak at index 0)
        sample_rate: Sample rate in Hz
        config: Waterfall configuration

    Returns:
        WaterfallData
    """
    cfg = config or WaterfallConfig()
    ir = np.asarray(ir, dtype=np.float64)

    total_samples = min(int(round(cfg.window_sec * sample_rate)), len(ir))
    fft_size = next_power_of_two(total_samples)

    log_f_min = np.log10(cfg.f_min)
    log_f_max = np.log10(cfg.f_max)
    t = np.arange(cfg.num_freq_points) / (cfg.num_freq_points - 1)
    frequencies = 10 ** (log_f_min + t * (log_f_max - log_f_min))
    freq_bins = frequencies / sample_rate * fft_size

    # Interpolation bins, kept inside the positive half of the spectrum
    top_bin = max(fft_size // 2 - 1, 0)
    bin_low = np.minimum(np.floor(freq_bins).astype(np.intp), top_bin)
    bin_high = np.minimum(bin_low + 1, top_bin)
    frac = freq_bins - np.floor(freq_bins)

    slices = []
    max_db = -np.inf
    previous_start = -1

    for s in range(cfg.num_slices):
        start = int(round(s / cfg.num_slices * total_samples))
        if start <= previous_start:
            # Window shorter than num_slices samples: offsets collide
            continue
        previous_start = start

        remaining = len(ir) - start
        if remaining <= 0:
            break

        seg_len = min(total_samples - start, remaining)
        if seg_len <= 0:
            break

        segment = ir[start:start + seg_len] * _slice_window(seg_len)

        re, im = real_to_complex(segment, fft_size)
        fft(re, im)

        mag_low = np.hypot(re[bin_low], im[bin_low])
        mag_high = np.hypot(re[bin_high], im[bin_high])
        mag = mag_low + frac * (mag_high - mag_low)

        magnitude_db = magnitude_to_db(mag / fft_size)

        max_db = max(max_db, float(np.max(magnitude_db)))
        slices.append(WaterfallSlice(time_sec=start / sample_rate, magnitude_db=magnitude_db))

    if not slices:
        max_db = SILENCE_DB

    return WaterfallData(slices=slices, frequencies=frequencies, max_db=max_db)


def _slice_window(seg_len: int) -> np.ndarray:
    """Flat first half, half-Hann taper reaching 0 at the last sample."""
    i = np.arange(seg_len)
    if seg_len > 1:
        taper = 0.5 * (1 - np.cos(np.pi * (seg_len - 1 - i) / (seg_len - 1)))
    else:
        taper = np.zeros(seg_len)
    taper[-1] = 0.0
    return np.where(i < seg_len / 2, 1.0, taper)
