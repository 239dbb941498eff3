"""
Measurement Analysis

Runs the complete analysis of one sweep measurement:

    recording -> deconvolution -> impulse response
        -> frequency response -> calibration -> smoothing -> peak detection
        -> energy decay curve / RT60
        -> waterfall

Every stage is a pure function of its inputs; this module only wires them
together. A failing deconvolution leaves the impulse response (and all
stages derived from it) unavailable but never aborts the measurement:
recording statistics are still reported.
"""

import logging
import warnings
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .calibration import CalibrationData, apply_calibration
from .deconvolution import ImpulseResponseResult, extract_impulse_response
from .frequency_response import FrequencyPoint, compute_magnitude_response, window_ir
from .peak_detection import DetectedPeak, PeakDetectionConfig, detect_peaks
from .rt60 import RT60Config, RT60Result, compute_edc, estimate_rt60
from .signal_processing import CLIPPING_THRESHOLD, compute_rms, detect_clipping
from .smoothing import SmoothingOption, smooth_frequency_response, smoothing_option_to_fraction
from .sweep import SweepParams, generate_inverse_filter
from .waterfall import WaterfallConfig, WaterfallData, compute_waterfall


logger = logging.getLogger(__name__)


# At 48 kHz this is 0.5 s, enough for the room IR display and analysis
IR_MAX_SAMPLES = 24000


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Configuration of a complete measurement analysis.

    Attributes:
        ir_max_samples: Cap on the IR length after the peak (None = full tail)
        ir_window_sec: IR window for the frequency response
        response_points: Points on the log frequency axis
        smoothing: Fractional-octave smoothing preset
        clipping_threshold: Sample level counted as clipped
        peaks: Peak detection configuration
        rt60: RT60 evaluation policy
        waterfall: Waterfall configuration (frequency range follows the sweep
            unless set explicitly)
    """
    ir_max_samples: Optional[int] = IR_MAX_SAMPLES
    ir_window_sec: Optional[float] = 0.2
    response_points: int = 500
    smoothing: SmoothingOption = SmoothingOption.NONE
    clipping_threshold: float = CLIPPING_THRESHOLD
    peaks: PeakDetectionConfig = field(default_factory=PeakDetectionConfig)
    rt60: RT60Config = field(default_factory=RT60Config)
    waterfall: Optional[WaterfallConfig] = None

    def __post_init__(self):
        """Validation."""
        if self.ir_max_samples is not None and self.ir_max_samples < 1:
            raise ValueError("ir_max_samples must be at least 1")
        if self.ir_window_sec is not None and self.ir_window_sec <= 0:
            raise ValueError("ir_window_sec must be positive")
        if self.response_points < 1:
            raise ValueError("response_points must be at least 1")
        if not 0 < self.clipping_threshold <= 1:
            raise ValueError("clipping_threshold must be in (0, 1]")


@dataclass
class MeasurementAnalysis:
    """
    Complete result of one measurement run.

    Stages derived from the impulse response are None (or empty) when
    the impulse response is unavailable.
    """
    sweep: SweepParams
    rms: float
    peak: float
    clipped: bool
    clipped_sample_count: int
    duration_seconds: float
    impulse_response: Optional[ImpulseResponseResult] = None
    frequency_response: list[FrequencyPoint] = field(default_factory=list)
    peaks: list[DetectedPeak] = field(default_factory=list)
    edc_db: Optional[np.ndarray] = field(default=None, repr=False)
    rt60: Optional[RT60Result] = None
    waterfall: Optional[WaterfallData] = None
    calibration_file: Optional[str] = None

    @property
    def sample_rate(self) -> int:
        return self.sweep.sample_rate

    @property
    def has_impulse_response(self) -> bool:
        return self.impulse_response is not None


def analyse_measurement(
    recording: np.ndarray,
    sweep: SweepParams,
    calibration: Optional[CalibrationData] = None,
    config: Optional[AnalysisConfig] = None,
) -> MeasurementAnalysis:
    """
    Analyse a sweep recording.

    Args:
        recording: Captured mono recording at sweep.sample_rate
        sweep: Parameters of the sweep that was played
        calibration: Optional microphone calibration
        config: Analysis configuration

    Returns:
        MeasurementAnalysis
    """
    cfg = config or AnalysisConfig()
    recording = np.asarray(recording, dtype=np.float64)
    sample_rate = sweep.sample_rate

    clipping = detect_clipping(recording, cfg.clipping_threshold)
    if clipping.clipped:
        warnings.warn(
            f"Recording contains {clipping.clipped_sample_count} clipped samples; "
            "reduce the playback level for a clean measurement.",
            UserWarning,
        )

    result = MeasurementAnalysis(
        sweep=sweep,
        rms=compute_rms(recording),
        peak=clipping.peak,
        clipped=clipping.clipped,
        clipped_sample_count=clipping.clipped_sample_count,
        duration_seconds=len(recording) / sample_rate,
        calibration_file=calibration.filename if calibration is not None else None,
    )

    try:
        inverse_filter = generate_inverse_filter(sweep)
        impulse = extract_impulse_response(recording, inverse_filter, cfg.ir_max_samples)
    except (ValueError, FloatingPointError, MemoryError):
        logger.warning("Deconvolution failed, impulse response unavailable", exc_info=True)
        return result

    result.impulse_response = impulse
    ir = impulse.ir
    logger.debug(
        "Impulse response: %d samples, peak at %d (raw %.4g)",
        len(ir), impulse.peak_index, impulse.raw_peak,
    )

    windowed = window_ir(ir, sample_rate, cfg.ir_window_sec)
    points = compute_magnitude_response(
        windowed, sample_rate, sweep.f_start, sweep.f_end, cfg.response_points,
    )
    if calibration is not None:
        points = apply_calibration(points, calibration)
    points = smooth_frequency_response(points, smoothing_option_to_fraction(cfg.smoothing))
    result.frequency_response = list(points)

    result.peaks = detect_peaks(result.frequency_response, cfg.peaks)

    result.edc_db = compute_edc(ir)
    result.rt60 = estimate_rt60(ir, sample_rate, cfg.rt60)
    if result.rt60 is None:
        logger.debug("RT60 not available (insufficient decay range)")

    waterfall_cfg = cfg.waterfall or WaterfallConfig(
        num_slices=40, f_min=sweep.f_start, f_max=sweep.f_end,
    )
    result.waterfall = compute_waterfall(ir, sample_rate, waterfall_cfg)

    logger.debug(
        "Analysis complete: %d response points, %d peaks, %d waterfall slices",
        len(result.frequency_response), len(result.peaks), len(result.waterfall.slices),
    )

    return result
