from __future__ import annotations

import argparse
import csv
import json
import logging
from pathlib import Path

from .frames import read_velocity_stream, write_velocity_stream
from .models import (
    DETECTOR_SIGNALS,
    DOWNSAMPLE_MODES,
    M_TO_CM,
    M_TO_MM,
    CycleResult,
    PipelineConfig,
)
from .pipeline import VelocityPipeline
from .synthetic import SyntheticStreamConfig, available_scenarios, generate_velocity_stream

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _config_to_dict(config: PipelineConfig) -> dict[str, object]:
    return {
        "downsample_factor": config.downsample_factor,
        "filter_window": config.filter_window,
        "ejection_threshold": config.ejection_threshold,
        "confirmation_count": config.confirmation_count,
        "waveform_capacity": config.waveform_capacity,
        "pulse_repetition_frequency_hz": config.pulse_repetition_frequency_hz,
        "detector_signal": config.detector_signal,
        "downsample_mode": config.downsample_mode,
        "trim_confirmation_samples": config.trim_confirmation_samples,
    }


def _cycle_to_dict(cycle: CycleResult) -> dict[str, float | int]:
    return {
        "index": cycle.index,
        "sample_count": cycle.sample_count,
        "duration_s": cycle.duration_s,
        "vti_cm": cycle.vti_m * M_TO_CM,
        "peak_velocity_cm_s": cycle.peak_velocity_m_s * M_TO_CM,
        "stroke_volume_ml": cycle.stroke_volume_ml,
    }


def _write_cycles_csv(path: Path, cycles: list[CycleResult]) -> None:
    with path.open("w", newline="", encoding="utf-8") as file:
        writer = csv.writer(file)
        writer.writerow(
            [
                "cycle",
                "sample_count",
                "duration_s",
                "vti_cm",
                "peak_velocity_cm_s",
                "stroke_volume_ml",
            ]
        )
        for cycle in cycles:
            writer.writerow(
                [
                    cycle.index,
                    cycle.sample_count,
                    f"{cycle.duration_s:.6f}",
                    f"{cycle.vti_m * M_TO_CM:.6f}",
                    f"{cycle.peak_velocity_m_s * M_TO_CM:.6f}",
                    f"{cycle.stroke_volume_ml:.6f}",
                ]
            )


def _add_pipeline_arguments(parser: argparse.ArgumentParser) -> None:
    defaults = PipelineConfig()
    parser.add_argument("--downsample-factor", type=int, default=defaults.downsample_factor)
    parser.add_argument("--filter-window", type=int, default=defaults.filter_window)
    parser.add_argument(
        "--ejection-threshold-m-s", type=float, default=defaults.ejection_threshold
    )
    parser.add_argument("--confirmation-count", type=int, default=defaults.confirmation_count)
    parser.add_argument("--waveform-capacity", type=int, default=defaults.waveform_capacity)
    parser.add_argument(
        "--prf-hz", type=float, default=defaults.pulse_repetition_frequency_hz
    )
    parser.add_argument(
        "--detector-signal", choices=DETECTOR_SIGNALS, default=defaults.detector_signal
    )
    parser.add_argument(
        "--downsample-mode", choices=DOWNSAMPLE_MODES, default=defaults.downsample_mode
    )
    parser.add_argument(
        "--trim-confirmation-samples",
        action="store_true",
        help="Integrate only the above-threshold run of each cycle.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vti-monitor",
        description="Velocity-time integral and stroke volume from Doppler velocity streams.",
    )
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default="WARNING",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser(
        "analyze-stream",
        help="Replay a recorded velocity stream and report per-cycle VTI.",
    )
    analyze.add_argument("input_path", help="Text file with one velocity frame (m/s) per line.")
    _add_pipeline_arguments(analyze)
    analyze.add_argument("--vessel-radius-mm", type=float, default=10.0)
    analyze.add_argument(
        "--output-csv",
        help="Path for per-cycle CSV. Default: <input_stem>_cycles.csv",
    )
    analyze.add_argument(
        "--output-json",
        help="Path for summary JSON. Default: <input_stem>_vti_summary.json",
    )

    synth = subparsers.add_parser(
        "generate-synthetic-stream",
        help="Generate a synthetic Doppler velocity stream with ground-truth VTI.",
    )
    synth.add_argument("--scenario", choices=available_scenarios(), default="quiet_transducer")
    synth.add_argument("--heart-rate-bpm", type=float, default=72.0)
    synth.add_argument("--peak-velocity-m-s", type=float, default=0.9)
    synth.add_argument("--ejection-fraction-of-cycle", type=float, default=0.35)
    synth.add_argument("--duration-s", type=float, default=5.0)
    synth.add_argument("--sample-rate-hz", type=float, default=1000.0)
    synth.add_argument("--seed", type=int, default=42)
    synth.add_argument(
        "--output-txt",
        help="Path for the replayable frame file. Default: synthetic_<scenario>.txt",
    )
    synth.add_argument(
        "--output-json",
        help="Path for ground-truth JSON. Default: synthetic_<scenario>_truth.json",
    )

    return parser


def _handle_analyze_stream(args: argparse.Namespace) -> int:
    input_path = Path(args.input_path)
    if not input_path.exists():
        raise FileNotFoundError(input_path)

    config = PipelineConfig(
        downsample_factor=args.downsample_factor,
        filter_window=args.filter_window,
        ejection_threshold=args.ejection_threshold_m_s,
        confirmation_count=args.confirmation_count,
        waveform_capacity=args.waveform_capacity,
        pulse_repetition_frequency_hz=args.prf_hz,
        detector_signal=args.detector_signal,
        downsample_mode=args.downsample_mode,
        trim_confirmation_samples=args.trim_confirmation_samples,
    )
    stream = read_velocity_stream(input_path)
    if stream.frame_count == 0:
        print(f"No valid velocity frames in {input_path}")
        return 1

    pipeline = VelocityPipeline(config, vessel_radius_m=args.vessel_radius_mm / M_TO_MM)
    cycles: list[CycleResult] = []
    for velocity in stream.velocities_m_s:
        cycle = pipeline.on_sample(velocity)
        if cycle is not None:
            cycles.append(cycle)

    output_csv = Path(args.output_csv) if args.output_csv else input_path.with_name(
        f"{input_path.stem}_cycles.csv"
    )
    output_json = Path(args.output_json) if args.output_json else input_path.with_name(
        f"{input_path.stem}_vti_summary.json"
    )

    _write_cycles_csv(output_csv, cycles)

    mean_vti_cm = (
        sum(cycle.vti_m for cycle in cycles) / len(cycles) * M_TO_CM if cycles else None
    )
    readout = pipeline.readout()
    output_json.write_text(
        json.dumps(
            {
                "input_path": str(input_path),
                "config": _config_to_dict(config),
                "frames": {
                    "valid": stream.frame_count,
                    "malformed_lines": stream.malformed_lines,
                },
                "vessel_radius_mm": readout.vessel_radius_mm,
                "cycles_completed": len(cycles),
                "last_vti_cm": readout.vti_cm,
                "last_stroke_volume_ml": readout.stroke_volume_ml,
                "mean_vti_cm": mean_vti_cm,
                "cycles": [_cycle_to_dict(cycle) for cycle in cycles],
            },
            ensure_ascii=False,
            indent=2,
        ),
        encoding="utf-8",
    )

    print(f"Velocity stream analyzed: {input_path}")
    print(f"Frames: {stream.frame_count} valid, {len(stream.malformed_lines)} malformed")
    print(f"Cycles CSV: {output_csv}")
    print(f"Summary JSON: {output_json}")
    print(f"Cycles: {len(cycles)}")
    print(f"Last VTI: {readout.vti_cm:.2f} cm")
    print(f"Stroke volume: {readout.stroke_volume_ml:.2f} ml")
    return 0


def _handle_generate_synthetic_stream(args: argparse.Namespace) -> int:
    config = SyntheticStreamConfig(
        scenario=args.scenario,
        heart_rate_bpm=args.heart_rate_bpm,
        peak_velocity_m_s=args.peak_velocity_m_s,
        ejection_fraction_of_cycle=args.ejection_fraction_of_cycle,
        duration_s=args.duration_s,
        sample_rate_hz=args.sample_rate_hz,
        seed=args.seed,
    )
    stream = generate_velocity_stream(config)

    default_stem = f"synthetic_{args.scenario}"
    output_txt = Path(args.output_txt) if args.output_txt else Path(f"{default_stem}.txt")
    output_json = (
        Path(args.output_json) if args.output_json else Path(f"{default_stem}_truth.json")
    )

    write_velocity_stream(output_txt, stream.velocity_m_s)
    output_json.write_text(
        json.dumps(
            {
                "generator": "generate-synthetic-stream",
                "scenario": config.scenario,
                "heart_rate_bpm": config.heart_rate_bpm,
                "peak_velocity_m_s": config.peak_velocity_m_s,
                "sample_rate_hz": config.sample_rate_hz,
                "seed": config.seed,
                "samples": len(stream.velocity_m_s),
                "beat_count": stream.beat_count,
                "ejection_duration_s": stream.ejection_duration_s,
                "true_vti_cm": stream.true_vti_m * M_TO_CM,
            },
            ensure_ascii=False,
            indent=2,
        ),
        encoding="utf-8",
    )

    print(f"Synthetic stream generated: scenario={config.scenario}")
    print(f"Frame file: {output_txt}")
    print(f"Ground truth JSON: {output_json}")
    print(f"Beats: {stream.beat_count}")
    print(f"True VTI: {stream.true_vti_m * M_TO_CM:.2f} cm")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    if args.command == "analyze-stream":
        return _handle_analyze_stream(args)
    if args.command == "generate-synthetic-stream":
        return _handle_generate_synthetic_stream(args)

    parser.error(f"unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
