"""
Deconvolution and impulse response extraction.

The recording is convolved with the inverse sweep filter. The main impulse
appears at a data-dependent offset (sweep length plus system latency), so
the result is auto-aligned to its peak and peak-normalised.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .convolution import convolve


@dataclass
class ImpulseResponseResult:
    """
    Result of impulse response extraction.

    Attributes:
        ir: Aligned impulse response, main peak at index 0, max|ir| = 1
            (all zeros if the convolution output is silent)
        peak_index: Peak position in the pre-shift convolution output
        raw_peak: Absolute peak value before normalisation
    """
    ir: np.ndarray
    peak_index: int
    raw_peak: float

    def duration_seconds(self, sample_rate: float) -> float:
        """Length of the aligned IR in seconds."""
        return len(self.ir) / sample_rate


def find_peak_index(buffer: np.ndarray) -> int:
    """
    Index of the first sample with the largest absolute value.

    Returns 0 for an empty buffer.
    """
    if len(buffer) == 0:
        return 0
    return int(np.argmax(np.abs(buffer)))


def extract_impulse_response(
    recording: np.ndarray,
    inverse_filter: np.ndarray,
    max_length_samples: Optional[int] = None,
) -> ImpulseResponseResult:
    """
    Extract the impulse response from a sweep recording.

    Steps:
    1. Convolve the recording with the inverse filter
    2. Locate the main peak (largest absolute value)
    3. Keep the tail starting at the peak, optionally capped
    4. Normalise to peak 1.0 (skipped for a silent result)

    Args:
        recording: Captured mono recording
        inverse_filter: Inverse filter of the sweep that was played
        max_length_samples: Optional cap on the IR length after the peak

    Returns:
        ImpulseResponseResult
    """
    raw = convolve(recording, inverse_filter)

    peak_index = find_peak_index(raw)
    raw_peak = float(abs(raw[peak_index])) if len(raw) else 0.0

    ir = raw[peak_index:].copy()
    if max_length_samples is not None:
        ir = ir[:max(0, max_length_samples)]

    if raw_peak > 0:
        ir /= raw_peak

    return ImpulseResponseResult(ir=ir, peak_index=peak_index, raw_peak=raw_peak)
