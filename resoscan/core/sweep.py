"""
Logarithmic Sine Sweep Synthesis

Generates the measurement excitation and its matched inverse filter
following the exponential sweep method (Farina, AES 108th Convention, 2000).

Technical assumptions:
- Instantaneous frequency f(t) = f_start * (f_end/f_start)^(t/T)
- Closed-form phase integral, no numerical integration
- Raised-cosine fades at both ends of the excitation only
- The inverse filter carries a -6 dB/octave envelope that compensates
  the pink energy distribution of the log sweep
"""

from dataclasses import dataclass, replace

import numpy as np


# Default measurement sweep (Hz, seconds)
SWEEP_FREQ_START = 20.0
SWEEP_FREQ_END = 15000.0
SWEEP_DURATION_SEC = 5.0


@dataclass(frozen=True)
class SweepParams:
    """
    Parameters of one logarithmic sweep.

    Immutable value, constructed once per measurement run.
    Invalid combinations are rejected at construction time.

    Attributes:
        f_start: Start frequency in Hz (> 0)
        f_end: End frequency in Hz (> f_start, <= Nyquist)
        duration_sec: Sweep duration in seconds
        sample_rate: Sample rate in Hz
        fade_in_sec: Raised-cosine fade-in length in seconds
        fade_out_sec: Raised-cosine fade-out length in seconds
    """
    f_start: float = SWEEP_FREQ_START
    f_end: float = SWEEP_FREQ_END
    duration_sec: float = SWEEP_DURATION_SEC
    sample_rate: int = 48000
    fade_in_sec: float = 0.01
    fade_out_sec: float = 0.01

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check the sweep invariants.

        Raises:
            ValueError: Names the violated constraint
        """
        if self.f_start <= 0:
            raise ValueError(f"f_start must be > 0, got {self.f_start}")
        if self.f_end <= self.f_start:
            raise ValueError(
                f"f_end must be > f_start, got f_end={self.f_end}, f_start={self.f_start}"
            )
        if self.duration_sec <= 0:
            raise ValueError(f"duration_sec must be > 0, got {self.duration_sec}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be > 0, got {self.sample_rate}")
        if self.f_end > self.sample_rate / 2:
            raise ValueError(
                f"f_end must be <= sample_rate / 2 (Nyquist = {self.sample_rate / 2} Hz), "
                f"got {self.f_end}"
            )
        if self.fade_in_sec < 0 or self.fade_out_sec < 0:
            raise ValueError("Fade times must be non-negative")

    @property
    def num_samples(self) -> int:
        """Length of the sweep in samples."""
        return int(round(self.duration_sec * self.sample_rate))

    @property
    def log_ratio(self) -> float:
        """ln(f_end / f_start), the sweep rate constant."""
        return float(np.log(self.f_end / self.f_start))


def generate_log_sweep(params: SweepParams) -> np.ndarray:
    """
    Generate a logarithmic sine sweep.

    Phase integral:
        phi(t) = K * (exp(t/T * ln(f_end/f_start)) - 1)
        K = 2*pi * f_start * T / ln(f_end/f_start)

    Fades (raised cosine, lengths clamped to the sweep length):
    - Fade-in:  w[n] = 0.5 * (1 - cos(pi * n / fade_in))
    - Fade-out: w[n] = 0.5 * (1 - cos(pi * (N-1-n) / fade_out))

    Args:
        params: Sweep parameters

    Returns:
        Sweep samples in [-1, 1], length round(duration * sample_rate)

    Raises:
        ValueError: Invalid sweep parameters
    """
    params.validate()

    n = params.num_samples
    duration = params.duration_sec
    ln_ratio = params.log_ratio

    t = np.arange(n) / params.sample_rate
    phase_k = 2 * np.pi * params.f_start * duration / ln_ratio
    sweep = np.sin(phase_k * (np.exp(t / duration * ln_ratio) - 1))

    fade_in = min(int(round(params.fade_in_sec * params.sample_rate)), n)
    if fade_in > 0:
        k = np.arange(fade_in)
        sweep[:fade_in] *= 0.5 * (1 - np.cos(np.pi * k / fade_in))

    fade_out = min(int(round(params.fade_out_sec * params.sample_rate)), n)
    if fade_out > 0:
        remaining = np.arange(fade_out)[::-1]  # N-1-n for the last samples
        sweep[n - fade_out:] *= 0.5 * (1 - np.cos(np.pi * remaining / fade_out))

    return sweep


def generate_inverse_filter(params: SweepParams) -> np.ndarray:
    """
    Generate the matched inverse filter for a log sweep.

    The raw (unfaded) sweep is time-reversed and weighted with
        a(t) = exp(-t * ln(f_end/f_start) / T)
    evaluated at the pre-reversal time. Low frequencies occupy more time
    in the sweep and are attenuated accordingly.

    Convolving the sweep with this filter approximates a Dirac impulse.

    Returns:
        Inverse filter, same length as the sweep, peak |amplitude| = 1
    """
    params.validate()

    raw = generate_log_sweep(replace(params, fade_in_sec=0.0, fade_out_sec=0.0))
    t = np.arange(len(raw)) / params.sample_rate
    envelope = np.exp(-t * params.log_ratio / params.duration_sec)

    inverse = (raw * envelope)[::-1].copy()

    peak = np.max(np.abs(inverse)) if len(inverse) else 0.0
    if peak > 0:
        inverse /= peak

    return inverse


def estimate_instantaneous_frequency(
    buffer: np.ndarray,
    center_sample: int,
    sample_rate: float,
    window_samples: int = 256,
) -> float:
    """
    Estimate the instantaneous frequency from the zero-crossing rate.

    Counts sign changes in a window centred on center_sample
    (clamped to the buffer). Each full cycle has two crossings.
    For diagnostics and tests only.

    Returns:
        Frequency estimate in Hz (0.0 for an empty window)
    """
    buffer = np.asarray(buffer, dtype=np.float64)
    half_win = window_samples // 2
    start = max(0, center_sample - half_win)
    end = min(len(buffer) - 1, center_sample + half_win)
    if end <= start:
        return 0.0

    non_negative = buffer[start:end + 1] >= 0
    crossings = np.count_nonzero(non_negative[1:] != non_negative[:-1])

    window_duration = (end - start) / sample_rate
    return crossings / (2 * window_duration)
