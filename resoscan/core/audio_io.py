"""
Audio I/O Module

Loads captured measurement recordings and stores impulse responses as WAV.

Technical assumptions:
- WAV files are loaded with soundfile (high precision, no conversion)
- All audio data is returned as float64 numpy arrays (range -1.0 to 1.0)
- Multi-channel files are downmixed to mono EXPLICITLY via mono_method;
  the measurement pipeline is mono only
- No implicit resampling: the recording's own sample rate is reported
  unless a target rate is requested explicitly
"""

import logging
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

import numpy as np
import soundfile as sf

from .signal_processing import downmix_to_mono, resample_audio


logger = logging.getLogger(__name__)


@dataclass
class Recording:
    """
    A loaded measurement recording.

    Attributes:
        data: Mono samples, Shape: (samples,)
        sample_rate: Sample rate of the file
        file_path: Path to source file
        source_channels: Channel count of the file before downmix
        subtype: soundfile subtype (e.g. "PCM_24")
    """
    data: np.ndarray
    sample_rate: int
    file_path: Path
    source_channels: int = 1
    subtype: Optional[str] = None

    def __post_init__(self):
        """Validate data integrity."""
        if self.data.ndim != 1:
            raise ValueError("Recording data must be mono (1D)")

    @property
    def num_samples(self) -> int:
        return len(self.data)

    @property
    def duration_seconds(self) -> float:
        return len(self.data) / self.sample_rate


def load_recording(
    file_path: str | Path,
    mono_method: Literal["average", "first"] = "average",
    target_sample_rate: Optional[int] = None,
) -> Recording:
    """
    Load a WAV recording as mono float64.

    Args:
        file_path: Path to the WAV file
        mono_method: Downmix method for multi-channel files
        target_sample_rate: Resample to this rate (None = keep the file rate)

    Returns:
        Recording

    Raises:
        FileNotFoundError: File does not exist
        ValueError: Unsupported format or unreadable file
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"Audio file not found: {path}")

    suffix = path.suffix.lower()
    if suffix != ".wav":
        raise ValueError(f"Unsupported format: {suffix}")

    try:
        data, sample_rate = sf.read(path, dtype="float64", always_2d=False)
        info = sf.info(path)
    except sf.LibsndfileError as e:
        raise ValueError(f"Cannot read audio file: {path}") from e

    channels = 1 if data.ndim == 1 else data.shape[1]
    if channels > 1:
        logger.info("Downmixing %d-channel recording %s (%s)", channels, path.name, mono_method)
        data = downmix_to_mono(data, method=mono_method)

    sample_rate = int(sample_rate)
    if target_sample_rate is not None and target_sample_rate != sample_rate:
        logger.info("Resampling %s from %d Hz to %d Hz", path.name, sample_rate, target_sample_rate)
        data = resample_audio(data, sample_rate, target_sample_rate)
        sample_rate = int(target_sample_rate)

    return Recording(
        data=data,
        sample_rate=sample_rate,
        file_path=path,
        source_channels=channels,
        subtype=info.subtype,
    )


def save_impulse_response(
    ir: np.ndarray,
    file_path: str | Path,
    sample_rate: int,
    subtype: Literal["PCM_16", "PCM_24", "PCM_32", "FLOAT"] = "FLOAT",
) -> None:
    """
    Save an impulse response as mono WAV file.

    Args:
        ir: Impulse response (float, range -1.0 to 1.0)
        file_path: Target path
        sample_rate: Sample rate
        subtype: WAV subtype for quantization

    Raises:
        ValueError: Invalid data
    """
    path = Path(file_path)
    ir = np.asarray(ir)

    if ir.ndim != 1:
        raise ValueError("Impulse response must be mono (1D)")

    if not np.issubdtype(ir.dtype, np.floating):
        raise ValueError("Audio data must be float")

    # Clipping warning
    if np.any(np.abs(ir) > 1.0):
        warnings.warn(
            "Audio data exceeds [-1.0, 1.0]. Clipping will be applied.",
            UserWarning,
        )
        ir = np.clip(ir, -1.0, 1.0)

    sf.write(path, ir, sample_rate, subtype=subtype)
