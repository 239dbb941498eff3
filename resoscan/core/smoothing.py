"""
Fractional-octave smoothing for frequency response data.

Moving average in the logarithmic frequency domain: each output point is
the mean dB of all input points within +/- fraction/2 octaves of its
frequency, as used by acoustic measurement tools (REW, ARTA).
"""

from enum import Enum
from typing import Optional, Sequence

import numpy as np

from .frequency_response import FrequencyPoint, response_db, response_frequencies


class SmoothingOption(Enum):
    """Smoothing presets offered to the user."""
    NONE = "none"
    SIXTH_OCTAVE = "1/6"
    THIRD_OCTAVE = "1/3"
    OCTAVE = "1/1"


_OPTION_FRACTIONS = {
    SmoothingOption.NONE: 0.0,
    SmoothingOption.SIXTH_OCTAVE: 1 / 6,
    SmoothingOption.THIRD_OCTAVE: 1 / 3,
    SmoothingOption.OCTAVE: 1.0,
}


def smoothing_option_to_fraction(option: SmoothingOption) -> float:
    """Smoothing width in octaves for a preset (0 for none)."""
    return _OPTION_FRACTIONS[SmoothingOption(option)]


def smooth_frequency_response(
    points: Sequence[FrequencyPoint],
    fraction_of_octave: Optional[float] = None,
) -> Sequence[FrequencyPoint]:
    """
    Apply fractional-octave smoothing.

    The window of each point is found by scanning outward from its index,
    which relies on the points being sorted by frequency.

    Args:
        points: Frequency response, ascending by frequency
        fraction_of_octave: Smoothing width in octaves (e.g. 1/6).
            None or <= 0 disables smoothing.

    Returns:
        New list with smoothed dB values and identical frequencies.
        The input object itself is returned when smoothing is disabled
        or the input is empty.
    """
    if not fraction_of_octave or fraction_of_octave <= 0 or len(points) == 0:
        return points

    half_octave = fraction_of_octave / 2
    log2_freqs = np.log2(response_frequencies(points))
    dbs = response_db(points)
    last = len(points) - 1

    result = []
    for i, point in enumerate(points):
        lo_log2 = log2_freqs[i] - half_octave
        hi_log2 = log2_freqs[i] + half_octave

        lo = i
        while lo > 0 and log2_freqs[lo - 1] >= lo_log2:
            lo -= 1

        hi = i
        while hi < last and log2_freqs[hi + 1] <= hi_log2:
            hi += 1

        result.append(FrequencyPoint(freq=point.freq, db=float(np.mean(dbs[lo:hi + 1]))))

    return result
