#!/usr/bin/env python3
"""
ResoScan - entry point

Offline analysis of a recorded log-sweep room measurement.

Usage:
    python main.py recording.wav [options]

Example:
    python main.py recording.wav --duration 5 --calibration umik.txt --smoothing 1/6
"""

import argparse
import logging
import sys

from resoscan.core import (
    AnalysisConfig,
    SmoothingOption,
    SweepParams,
    analyse_measurement,
    load_calibration_file,
    load_recording,
    save_impulse_response,
)
from resoscan.core.sweep import SWEEP_DURATION_SEC, SWEEP_FREQ_END, SWEEP_FREQ_START
from resoscan.utils import (
    format_db,
    format_duration,
    format_frequency,
    format_rt60,
    format_sample_rate,
)


logger = logging.getLogger("resoscan")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Analyse a recorded log-sweep measurement.",
    )
    parser.add_argument("recording", help="Mono or multi-channel WAV recording")
    parser.add_argument("--f-start", type=float, default=SWEEP_FREQ_START, help="Sweep start frequency (Hz)")
    parser.add_argument("--f-end", type=float, default=SWEEP_FREQ_END, help="Sweep end frequency (Hz)")
    parser.add_argument("--duration", type=float, default=SWEEP_DURATION_SEC, help="Sweep duration (s)")
    parser.add_argument("--calibration", help="Microphone calibration file (freq dB pairs)")
    parser.add_argument(
        "--smoothing",
        choices=[o.value for o in SmoothingOption],
        default=SmoothingOption.NONE.value,
        help="Fractional-octave smoothing",
    )
    parser.add_argument("--sample-rate", type=int, help="Resample the recording to this rate (Hz)")
    parser.add_argument("--save-ir", metavar="PATH", help="Write the impulse response as WAV")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    """Run the analysis and print a summary."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        recording = load_recording(args.recording, target_sample_rate=args.sample_rate)
        sweep = SweepParams(
            f_start=args.f_start,
            f_end=args.f_end,
            duration_sec=args.duration,
            sample_rate=recording.sample_rate,
        )
        calibration = load_calibration_file(args.calibration) if args.calibration else None
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    config = AnalysisConfig(smoothing=SmoothingOption(args.smoothing))
    analysis = analyse_measurement(recording.data, sweep, calibration, config)

    print(f"Recording:   {recording.file_path.name}, {format_sample_rate(recording.sample_rate)}, "
          f"{format_duration(analysis.duration_seconds)}")
    print(f"Level:       RMS {analysis.rms:.4f}, peak {analysis.peak:.4f}"
          + (f" (CLIPPED: {analysis.clipped_sample_count} samples)" if analysis.clipped else ""))
    if calibration is not None:
        print(f"Calibration: {calibration.filename} ({len(calibration.points)} points)")

    if analysis.impulse_response is None:
        print("Impulse response: unavailable")
        return 0

    ir = analysis.impulse_response
    print(f"Impulse response: {format_duration(ir.duration_seconds(sweep.sample_rate))}, "
          f"peak at sample {ir.peak_index}")

    rt60 = analysis.rt60
    if rt60 is not None:
        print(f"RT60:        {format_rt60(rt60.rt60)} (T20 {format_rt60(rt60.t20)}, "
              f"T30 {format_rt60(rt60.t30)}, noise floor {format_db(rt60.noise_floor_db)})")
    else:
        print("RT60:        n/a (insufficient decay range)")

    if analysis.peaks:
        print("Resonances:")
        for peak in analysis.peaks:
            print(f"  {format_frequency(peak.freq):>10}  {format_db(peak.db):>10}  "
                  f"+{peak.prominence:.1f} dB  {peak.band or '-'}")
    else:
        print("Resonances:  none above threshold")

    if analysis.waterfall is not None:
        print(f"Waterfall:   {len(analysis.waterfall.slices)} slices, "
              f"max {format_db(analysis.waterfall.max_db)}")

    if args.save_ir:
        save_impulse_response(ir.ir, args.save_ir, sweep.sample_rate)
        logger.info("Impulse response written to %s", args.save_ir)

    return 0


if __name__ == "__main__":
    sys.exit(main())
