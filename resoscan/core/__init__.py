"""
Core DSP module - fully testable without GUI dependencies.

This module contains all signal processing logic:
- Transform engine (FFT/IFFT)
- Log sweep synthesis and inverse filter
- Convolution and impulse response extraction
- Frequency response, smoothing and microphone calibration
- RT60 (Schroeder integration), resonance peaks, waterfall
- Recording I/O and end-to-end measurement analysis
"""

from .fft import fft, ifft, is_power_of_two, next_power_of_two, real_to_complex
from .sweep import (
    SweepParams,
    generate_log_sweep,
    generate_inverse_filter,
    estimate_instantaneous_frequency,
)
from .convolution import convolve
from .deconvolution import ImpulseResponseResult, extract_impulse_response, find_peak_index
from .frequency_response import FrequencyPoint, window_ir, compute_magnitude_response
from .smoothing import SmoothingOption, smooth_frequency_response, smoothing_option_to_fraction
from .calibration import (
    CalibrationData,
    CalibrationFormatError,
    CalibrationPoint,
    parse_calibration_file,
    load_calibration_file,
    interpolate_calibration,
    apply_calibration,
)
from .rt60 import RT60Config, RT60Result, estimate_rt60, compute_edc
from .peak_detection import (
    DEFAULT_BANDS,
    DetectedPeak,
    FrequencyBand,
    PeakDetectionConfig,
    detect_peaks,
)
from .waterfall import WaterfallConfig, WaterfallData, WaterfallSlice, compute_waterfall
from .signal_processing import linear_to_db, db_to_linear, compute_rms, compute_peak, detect_clipping
from .audio_io import Recording, load_recording, save_impulse_response
from .measurement import AnalysisConfig, MeasurementAnalysis, analyse_measurement

__all__ = [
    "fft",
    "ifft",
    "is_power_of_two",
    "next_power_of_two",
    "real_to_complex",
    "SweepParams",
    "generate_log_sweep",
    "generate_inverse_filter",
    "estimate_instantaneous_frequency",
    "convolve",
    "ImpulseResponseResult",
    "extract_impulse_response",
    "find_peak_index",
    "FrequencyPoint",
    "window_ir",
    "compute_magnitude_response",
    "SmoothingOption",
    "smooth_frequency_response",
    "smoothing_option_to_fraction",
    "CalibrationData",
    "CalibrationFormatError",
    "CalibrationPoint",
    "parse_calibration_file",
    "load_calibration_file",
    "interpolate_calibration",
    "apply_calibration",
    "RT60Config",
    "RT60Result",
    "estimate_rt60",
    "compute_edc",
    "DEFAULT_BANDS",
    "DetectedPeak",
    "FrequencyBand",
    "PeakDetectionConfig",
    "detect_peaks",
    "WaterfallConfig",
    "WaterfallData",
    "WaterfallSlice",
    "compute_waterfall",
    "linear_to_db",
    "db_to_linear",
    "compute_rms",
    "compute_peak",
    "detect_clipping",
    "Recording",
    "load_recording",
    "save_impulse_response",
    "AnalysisConfig",
    "MeasurementAnalysis",
    "analyse_measurement",
]
