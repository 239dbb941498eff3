"""
Resonance peak detection on a frequency response.

Finds local maxima that stand out from their surroundings by a
configurable prominence, classifies them into frequency bands and
returns the strongest ones.

Algorithm:
1. Strict local maxima (higher than both neighbours)
2. Topographic prominence of each maximum
3. Filter by minimum prominence
4. Band classification (first matching band)
5. Sort by prominence (descending), keep the top N
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from scipy import signal

from .frequency_response import FrequencyPoint, response_db


@dataclass(frozen=True)
class FrequencyBand:
    """A labelled frequency range [min_hz, max_hz)."""
    label: str
    min_hz: float  # inclusive
    max_hz: float  # exclusive

    def contains(self, freq: float) -> bool:
        return self.min_hz <= freq < self.max_hz


DEFAULT_BANDS: tuple[FrequencyBand, ...] = (
    FrequencyBand("Room modes", 20.0, 300.0),
    FrequencyBand("Mid / High", 300.0, 15000.0),
)


@dataclass(frozen=True)
class PeakDetectionConfig:
    """
    Configuration for peak detection.

    Attributes:
        min_prominence: Minimum prominence in dB for a reported peak
        max_peaks: Maximum number of peaks returned
        bands: Ordered bands for classification
    """
    min_prominence: float = 3.0
    max_peaks: int = 10
    bands: tuple[FrequencyBand, ...] = DEFAULT_BANDS

    def __post_init__(self):
        """Validation."""
        if self.max_peaks < 0:
            raise ValueError(f"max_peaks must be >= 0, got {self.max_peaks}")
        # Accept any sequence of bands but store it immutably
        object.__setattr__(self, "bands", tuple(self.bands))


@dataclass(frozen=True)
class DetectedPeak:
    """
    A detected resonance.

    Attributes:
        freq: Peak frequency in Hz
        db: Level at the peak in dB
        prominence: Height above the higher bounding valley in dB
        index: Position in the input response
        band: Label of the containing band, None outside all bands
    """
    freq: float
    db: float
    prominence: float
    index: int
    band: Optional[str]


def detect_peaks(
    points: Sequence[FrequencyPoint],
    config: Optional[PeakDetectionConfig] = None,
) -> list[DetectedPeak]:
    """
    Detect resonance peaks in a frequency response.

    Args:
        points: Frequency response, ascending by frequency
        config: Detection parameters

    Returns:
        Peaks sorted by prominence (descending), at most max_peaks.
        Empty for fewer than 3 points or when nothing is prominent enough.
    """
    cfg = config or PeakDetectionConfig()

    if len(points) < 3:
        return []

    db = response_db(points)

    # Strict local maxima, endpoints excluded
    candidates = np.flatnonzero((db[1:-1] > db[:-2]) & (db[1:-1] > db[2:])) + 1
    if len(candidates) == 0:
        return []

    prominences = signal.peak_prominences(db, candidates)[0]

    peaks = []
    for i, prominence in zip(candidates, prominences):
        if prominence < cfg.min_prominence:
            continue

        peaks.append(DetectedPeak(
            freq=points[i].freq,
            db=points[i].db,
            prominence=float(prominence),
            index=int(i),
            band=classify_band(points[i].freq, cfg.bands),
        ))

    peaks.sort(key=lambda p: p.prominence, reverse=True)

    return peaks[:cfg.max_peaks]


def compute_prominence(points: Sequence[FrequencyPoint], peak_index: int) -> float:
    """
    Topographic prominence of the peak at peak_index.

    Each side is scanned until a higher point or the edge; the lowest
    level seen is that side's valley.
    prominence = peak dB - max(left valley, right valley)
    """
    prominences = signal.peak_prominences(response_db(points), [peak_index])[0]
    return float(prominences[0])


def classify_band(freq: float, bands: Sequence[FrequencyBand]) -> Optional[str]:
    """Label of the first band containing freq, or None."""
    for band in bands:
        if band.contains(freq):
            return band.label
    return None
