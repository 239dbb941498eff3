"""
Reverberation Time (RT60) - Schroeder backward integration.

Pipeline:
1. Square the impulse response (energy)
2. Energy Decay Curve (EDC) by backward integration
3. Normalise to the total energy and convert to dB
4. Linear regression on -5..-25 dB (T20) and -5..-35 dB (T30)
5. Extrapolate the decay rate to 60 dB

Documented limitations:
- No noise compensation (Lundeby) before integration; with a high
  noise floor the EDC tail flattens and T30 becomes unavailable
- Broadband only, no octave-band decomposition
- The plausibility bound (default 30 s) is a policy value, not physics
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .signal_processing import SILENCE_DB


@dataclass(frozen=True)
class RT60Config:
    """
    Evaluation ranges and plausibility policy for RT60 estimation.

    Attributes:
        t20_range: (start_db, end_db) regression window for T20
        t30_range: (start_db, end_db) regression window for T30
        max_rt60_sec: Estimates above this are treated as failures
        noise_tail_fraction: Trailing fraction of the EDC averaged
            for the noise floor estimate
    """
    t20_range: tuple[float, float] = (-5.0, -25.0)
    t30_range: tuple[float, float] = (-5.0, -35.0)
    max_rt60_sec: float = 30.0
    noise_tail_fraction: float = 0.1

    def __post_init__(self):
        """Validation."""
        for name, (start_db, end_db) in (("t20_range", self.t20_range), ("t30_range", self.t30_range)):
            if not end_db < start_db <= 0:
                raise ValueError(f"{name} must satisfy end_db < start_db <= 0, got {(start_db, end_db)}")
        if self.max_rt60_sec <= 0:
            raise ValueError("max_rt60_sec must be positive")
        if not 0 < self.noise_tail_fraction <= 1:
            raise ValueError("noise_tail_fraction must be in (0, 1]")


@dataclass
class DecayFit:
    """
    Linear regression of the EDC over one evaluation range.

    Attributes:
        decay_rate_db_per_sec: Positive decay rate
        start_index: First EDC sample in the regression window
        end_index: Last EDC sample in the regression window (inclusive)
        intercept_db: Regression line value at t = 0
    """
    decay_rate_db_per_sec: float
    start_index: int
    end_index: int
    intercept_db: float

    @property
    def rt60(self) -> float:
        """Time for a 60 dB decay at this rate."""
        return 60.0 / self.decay_rate_db_per_sec


@dataclass
class RT60Result:
    """
    Result of RT60 estimation.

    Attributes:
        rt60: Reverberation time in seconds (from T20)
        t20: T20 extrapolated to 60 dB
        t30: T30 extrapolated to 60 dB, None without enough dynamic range
        edc_db: Energy decay curve in dB, same length as the IR, starts at 0 dB
        noise_floor_db: Mean EDC level over the final part of the IR
    """
    rt60: float
    t20: float
    t30: Optional[float]
    edc_db: np.ndarray = field(repr=False)
    noise_floor_db: float


def schroeder_integration(energy: np.ndarray) -> np.ndarray:
    """Backward integration according to Schroeder: edc[n] = sum(energy[n:])."""
    return np.cumsum(energy[::-1])[::-1]


def compute_edc(ir: np.ndarray) -> np.ndarray:
    """
    Energy Decay Curve in dB, for plotting.

    Normalised so the first sample is 0 dB. Samples with no remaining
    energy (and every sample of a silent IR) are set to -120 dB.
    """
    ir = np.asarray(ir, dtype=np.float64)
    if len(ir) == 0:
        return np.zeros(0, dtype=np.float64)

    edc = schroeder_integration(np.square(ir))
    return _edc_to_db(edc)


def fit_decay_range(
    edc_db: np.ndarray,
    sample_rate: float,
    start_db: float,
    end_db: float,
) -> Optional[DecayFit]:
    """
    Least-squares fit of the EDC between two dB thresholds.

    The window starts at the first sample at or below start_db and ends at
    the first following sample at or below end_db.

    Args:
        edc_db: EDC in dB (0 dB at the start)
        sample_rate: Sample rate in Hz
        start_db: Upper threshold (e.g. -5)
        end_db: Lower threshold (e.g. -25)

    Returns:
        DecayFit, or None if the window is missing, shorter than
        3 samples, or the curve does not decay
    """
    below_start = np.flatnonzero(edc_db <= start_db)
    if len(below_start) == 0:
        return None
    start_idx = int(below_start[0])

    below_end = np.flatnonzero(edc_db[start_idx:] <= end_db)
    if len(below_end) == 0:
        return None
    end_idx = start_idx + int(below_end[0])

    if end_idx - start_idx + 1 < 3:
        return None

    t = np.arange(start_idx, end_idx + 1) / sample_rate
    y = edc_db[start_idx:end_idx + 1]

    slope, intercept = np.polyfit(t, y, 1)
    decay_rate = -float(slope)

    if not np.isfinite(decay_rate) or decay_rate <= 0:
        return None

    return DecayFit(
        decay_rate_db_per_sec=decay_rate,
        start_index=start_idx,
        end_index=end_idx,
        intercept_db=float(intercept),
    )


def estimate_rt60(
    ir: np.ndarray,
    sample_rate: float,
    config: Optional[RT60Config] = None,
) -> Optional[RT60Result]:
    """
    Estimate the reverberation time of an impulse response.

    Insufficient data is an expected outcome (anechoic or outdoor
    measurements, low SNR) and is reported as None, not as an exception.

    Args:
        ir: Impulse response
        sample_rate: Sample rate in Hz
        config: Evaluation ranges and plausibility policy

    Returns:
        RT60Result, or None if the IR is too short, silent, has no T20
        range, or the estimate is implausible
    """
    cfg = config or RT60Config()
    ir = np.asarray(ir, dtype=np.float64)

    if len(ir) < 2:
        return None

    edc = schroeder_integration(np.square(ir))
    if edc[0] <= 0:
        return None

    edc_db = _edc_to_db(edc)

    tail_start = int(np.floor(len(ir) * (1 - cfg.noise_tail_fraction)))
    tail = edc_db[tail_start:]
    noise_floor_db = float(np.mean(tail)) if len(tail) else -60.0

    t20_fit = fit_decay_range(edc_db, sample_rate, *cfg.t20_range)
    if t20_fit is None:
        return None
    t20 = t20_fit.rt60

    t30_fit = fit_decay_range(edc_db, sample_rate, *cfg.t30_range)
    t30 = t30_fit.rt60 if t30_fit is not None else None

    rt60 = t20
    if rt60 <= 0 or rt60 > cfg.max_rt60_sec:
        return None

    return RT60Result(
        rt60=rt60,
        t20=t20,
        t30=t30,
        edc_db=edc_db,
        noise_floor_db=noise_floor_db,
    )


def _edc_to_db(edc: np.ndarray) -> np.ndarray:
    """Normalise an EDC to its first sample and convert to dB."""
    total = edc[0]
    if total <= 0:
        return np.full(len(edc), SILENCE_DB)

    ratio = edc / total
    db = np.full(len(edc), SILENCE_DB)
    positive = ratio > 0
    db[positive] = 10 * np.log10(ratio[positive])
    return db
