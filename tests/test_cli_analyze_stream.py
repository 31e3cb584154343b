from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from vti_monitor.cli import main as cli_main


def test_cli_generate_then_analyze_synthetic_stream(tmp_path: Path) -> None:
    frames_txt = tmp_path / "quiet.txt"
    truth_json = tmp_path / "quiet_truth.json"

    exit_code = cli_main(
        [
            "generate-synthetic-stream",
            "--scenario",
            "quiet_transducer",
            "--output-txt",
            str(frames_txt),
            "--output-json",
            str(truth_json),
        ]
    )
    assert exit_code == 0
    truth = json.loads(truth_json.read_text(encoding="utf-8"))
    assert truth["beat_count"] == 6

    cycles_csv = tmp_path / "cycles.csv"
    summary_json = tmp_path / "summary.json"
    exit_code = cli_main(
        [
            "analyze-stream",
            str(frames_txt),
            "--downsample-factor",
            "1",
            "--vessel-radius-mm",
            "11",
            "--output-csv",
            str(cycles_csv),
            "--output-json",
            str(summary_json),
        ]
    )

    assert exit_code == 0
    summary = json.loads(summary_json.read_text(encoding="utf-8"))
    assert summary["config"]["downsample_factor"] == 1
    assert summary["frames"]["valid"] == 5001
    assert summary["cycles_completed"] == truth["beat_count"]
    assert summary["vessel_radius_mm"] == pytest.approx(11.0)
    assert summary["mean_vti_cm"] == pytest.approx(truth["true_vti_cm"], rel=0.05)

    with cycles_csv.open(newline="", encoding="utf-8") as file:
        rows = list(csv.DictReader(file))
    assert len(rows) == truth["beat_count"]
    assert [int(row["cycle"]) for row in rows] == list(range(1, 7))


def test_cli_analyze_stream_default_output_paths(tmp_path: Path) -> None:
    frames_txt = tmp_path / "recording.txt"
    frames_txt.write_text(
        "\n".join(["0.2"] * 8 + ["0.05"] * 5 + ["oops"]) + "\n",
        encoding="utf-8",
    )

    exit_code = cli_main(
        [
            "analyze-stream",
            str(frames_txt),
            "--downsample-factor",
            "1",
            "--detector-signal",
            "raw",
            "--trim-confirmation-samples",
        ]
    )

    assert exit_code == 0
    summary = json.loads((tmp_path / "recording_vti_summary.json").read_text(encoding="utf-8"))
    assert summary["frames"]["malformed_lines"] == [14]
    assert summary["cycles_completed"] == 1
    assert summary["last_vti_cm"] == pytest.approx(0.14)
    assert (tmp_path / "recording_cycles.csv").exists()


def test_cli_analyze_stream_without_frames_fails(tmp_path: Path) -> None:
    frames_txt = tmp_path / "empty.txt"
    frames_txt.write_text("# nothing recorded\n", encoding="utf-8")

    assert cli_main(["analyze-stream", str(frames_txt)]) == 1


def test_cli_analyze_stream_requires_existing_input(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        cli_main(["analyze-stream", str(tmp_path / "missing.txt")])
