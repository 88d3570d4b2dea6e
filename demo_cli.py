#!/usr/bin/env python3
"""
demo_cli.py — Standalone command-line demo
============================================
Runs the pulse pipeline WITHOUT the FastAPI server, against the webcam or
a synthetic pulse signal, then prints the full cardiovascular screening.

Usage:
    python demo_cli.py --age 42 --duration 30
    python demo_cli.py --synthetic --synthetic-bpm 66 --duration 15

⚠️  DISCLAIMER: This is a WELLNESS SCREENING tool — NOT a medical device.
"""

import argparse
import sys
import time

from camera.source import CameraFrameSource, FrameSourceError, Region
from camera.synthetic import SyntheticFrameSource
from config import CAMERA_FPS, DEFAULT_AGE
from rppg.pipeline import CardiovascularAssessment, PulsePipeline, PulseReading
from rppg.scheduler import IntervalScheduler
from utils.logger import get_logger, set_level

logger = get_logger("demo_cli")


def pretty_print(label: str, value, unit: str = "") -> None:
    """Colourised terminal output."""
    print(f"  \033[1;36m{label:<28}\033[0m \033[1;33m{value}\033[0m {unit}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pulse-signal screening CLI demo")
    parser.add_argument("--age", type=int, default=DEFAULT_AGE, help="Age (years)")
    parser.add_argument("--duration", type=float, default=30.0, help="Scan duration (seconds)")
    parser.add_argument("--camera-index", type=int, default=0, help="OpenCV camera index")
    parser.add_argument(
        "--region", type=int, nargs=4, metavar=("X", "Y", "W", "H"),
        help="Sampling region in pixels (default: forehead heuristic)",
    )
    parser.add_argument("--synthetic", action="store_true", help="Use a synthetic pulse instead of the webcam")
    parser.add_argument("--synthetic-bpm", type=float, default=72.0, help="Pulse rate of the synthetic signal")
    parser.add_argument("--noise", type=float, default=0.5, help="Noise std of the synthetic signal")
    parser.add_argument("--log-level", default=None, help="Override the log level (DEBUG, INFO, ...)")
    return parser


def print_assessment(result: CardiovascularAssessment) -> None:
    hrv, bp, risk = result.hrv, result.blood_pressure, result.risk

    print("=" * 60)
    print("  RESULTS")
    print("=" * 60)
    print("\n  ── Heart Rate ──")
    pretty_print("Heart Rate", result.reading.bpm, "BPM")
    pretty_print("Signal confidence", result.reading.confidence)

    print("\n  ── Heart Rate Variability ──")
    if hrv.valid:
        pretty_print("RMSSD", hrv.rmssd, "ms")
        pretty_print("SDNN", hrv.sdnn, "ms")
        pretty_print("pNN50", hrv.pnn50, "%")
        pretty_print("Mean RR", hrv.mean_rr, "ms")
        pretty_print("Stress level", hrv.stress_level)
        pretty_print("HRV score", hrv.hrv_score, "/ 100")
    print(f"    {hrv.interpretation}")

    print("\n  ── Blood Pressure (ESTIMATED) ──")
    pretty_print("Systolic", bp.systolic, "mmHg")
    pretty_print("Diastolic", bp.diastolic, "mmHg")
    pretty_print("Confidence", bp.confidence)

    print("\n  ── Cardiovascular Risk (ESTIMATED) ──")
    pretty_print("Risk score", risk.risk_score, "/ 100")
    pretty_print("Risk level", risk.risk_level)
    for factor in risk.factors:
        print(f"    • {factor}")

    recommendations = dict.fromkeys(hrv.recommendations + risk.recommendations)
    if recommendations:
        print("\n  ── Recommendations ──")
        for rec in recommendations:
            print(f"    - {rec}")

    print("\n" + "=" * 60)
    print("  ⚠️  DISCLAIMER: All values above are ESTIMATES.")
    print("      Do NOT use for medical diagnosis or treatment.")
    print("=" * 60 + "\n")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.log_level:
        set_level(args.log_level)

    print("\n" + "=" * 60)
    print("  PULSE-SIGNAL SCREENING — CLI DEMO")
    print("=" * 60)
    print("  ⚠️  This is a WELLNESS SCREENING tool — NOT medical grade.")
    print("=" * 60 + "\n")

    if args.synthetic:
        source = SyntheticFrameSource(pulse_hz=args.synthetic_bpm / 60.0, noise_std=args.noise)
    else:
        source = CameraFrameSource(device_index=args.camera_index)

    scheduler = IntervalScheduler(interval_s=1.0 / CAMERA_FPS)
    region = Region(*args.region) if args.region else None
    pipeline = PulsePipeline(source, scheduler, region=region, age=args.age)

    readings: list[PulseReading] = []
    errors: list[str] = []

    def on_pulse(reading: PulseReading) -> None:
        readings.append(reading)
        if len(readings) % CAMERA_FPS == 0:
            print(f"  {reading.bpm:>3d} BPM  (confidence {reading.confidence:.2f})")

    try:
        pipeline.start(on_pulse, errors.append)
    except FrameSourceError as e:
        print(f"ERROR: {e}")
        return 1

    print(f"  Source       : {'synthetic' if args.synthetic else 'webcam'}")
    print(f"  Scan duration: {args.duration:.0f} s")
    print(f"  Age          : {args.age}\n")
    print("  Please look directly at the camera and stay still…\n")

    try:
        scheduler.run_until(deadline=time.monotonic() + args.duration)
    except KeyboardInterrupt:
        print("\n  Scan cancelled by user.")
    finally:
        pipeline.stop()

    print(f"\n  Processed {pipeline.tick_count} frames, {len(readings)} readings, "
          f"{len(errors)} frame errors.\n")
    if errors:
        logger.warning("Last frame error: %s", errors[-1])

    result = pipeline.assess()
    if result is None:
        print("  Insufficient data collected. Try again with better lighting "
              "and keep your face still.")
        return 1

    print_assessment(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
