"""
Microphone Calibration

Parses calibration files (frequency / dB correction pairs), interpolates
corrections to arbitrary frequencies and applies them to a response.

File format (one entry per line):
    <frequency_Hz> <correction_dB>

- Separated by whitespace and/or commas, extra columns are ignored
- Blank lines and lines starting with '#' or '*' are comments
- LF or CRLF line endings

Technical assumptions:
- Interpolation is linear in log10(frequency)
- Outside the calibrated range the nearest boundary value is used
  (flat extrapolation), no slope continuation
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from .frequency_response import FrequencyPoint


_LINE_SPLIT = re.compile(r"\r?\n")
_TOKEN_SPLIT = re.compile(r"[\s,]+")
_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class CalibrationFormatError(ValueError):
    """Malformed calibration file, with the offending 1-based line if known."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        super().__init__(message)
        self.line_number = line_number


@dataclass(frozen=True)
class CalibrationPoint:
    """A single calibration entry."""
    freq: float  # Hz
    db: float    # Correction added to the measured magnitude


@dataclass(frozen=True)
class CalibrationData:
    """
    Parsed calibration data, immutable once parsed.

    Attributes:
        filename: Source file name (display only)
        points: Calibration points sorted ascending by frequency
    """
    filename: str
    points: tuple[CalibrationPoint, ...]

    @property
    def frequency_range(self) -> tuple[float, float]:
        """Lowest and highest calibrated frequency in Hz."""
        return self.points[0].freq, self.points[-1].freq


def parse_calibration_file(text: str, filename: str) -> CalibrationData:
    """
    Parse the contents of a calibration file.

    Args:
        text: Raw file contents
        filename: Original file name (stored for display)

    Returns:
        CalibrationData with at least two points, ascending by frequency

    Raises:
        CalibrationFormatError: Malformed line or fewer than two data points
    """
    points = []

    for line_number, raw_line in enumerate(_LINE_SPLIT.split(text), start=1):
        line = raw_line.strip()

        if line == "" or line.startswith("#") or line.startswith("*"):
            continue

        parts = _TOKEN_SPLIT.split(line)
        if len(parts) < 2:
            raise CalibrationFormatError(
                f'Calibration file line {line_number}: expected "freq dB", got "{line}"',
                line_number,
            )

        freq = _parse_number(parts[0])
        if freq is None or not np.isfinite(freq) or freq <= 0:
            raise CalibrationFormatError(
                f'Calibration file line {line_number}: invalid frequency "{parts[0]}"',
                line_number,
            )

        db = _parse_number(parts[1])
        if db is None or not np.isfinite(db):
            raise CalibrationFormatError(
                f'Calibration file line {line_number}: invalid dB value "{parts[1]}"',
                line_number,
            )

        points.append(CalibrationPoint(freq=freq, db=db))

    if len(points) < 2:
        raise CalibrationFormatError("Calibration file must contain at least 2 data points")

    points.sort(key=lambda p: p.freq)

    return CalibrationData(filename=filename, points=tuple(points))


def load_calibration_file(file_path: str | Path) -> CalibrationData:
    """
    Read and parse a calibration file from disk.

    Raises:
        FileNotFoundError: File does not exist
        CalibrationFormatError: Invalid contents
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"Calibration file not found: {path}")

    # utf-8-sig strips the BOM some vendor tools write
    text = path.read_text(encoding="utf-8-sig")
    return parse_calibration_file(text, path.name)


def interpolate_calibration(
    calibration: Sequence[CalibrationPoint],
    target_freqs: Sequence[float],
) -> np.ndarray:
    """
    Interpolate calibration corrections at the target frequencies.

    Args:
        calibration: Calibration points, ascending by frequency
        target_freqs: Frequencies to evaluate (Hz)

    Returns:
        dB corrections, same length as target_freqs (zeros for empty calibration)
    """
    if len(calibration) == 0:
        return np.zeros(len(target_freqs), dtype=np.float64)

    cal_log_freqs = np.log10([p.freq for p in calibration])
    cal_dbs = [p.db for p in calibration]

    # np.interp clamps to the boundary values outside the calibrated range
    return np.interp(
        np.log10(np.asarray(target_freqs, dtype=np.float64)),
        cal_log_freqs,
        cal_dbs,
    )


def apply_calibration(
    points: Sequence[FrequencyPoint],
    calibration: CalibrationData,
) -> Sequence[FrequencyPoint]:
    """
    Add the calibration correction to a frequency response.

    Inputs are not modified. If either side is empty, points is
    returned unchanged.
    """
    if len(points) == 0 or len(calibration.points) == 0:
        return points

    corrections = interpolate_calibration(calibration.points, [p.freq for p in points])

    return [
        FrequencyPoint(freq=p.freq, db=p.db + float(c))
        for p, c in zip(points, corrections)
    ]


def _parse_number(token: str) -> Optional[float]:
    """Plain decimal or scientific number, None for anything else."""
    if not _NUMBER.fullmatch(token):
        return None
    return float(token)
