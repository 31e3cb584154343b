from __future__ import annotations

from pathlib import Path

import pytest

from vti_monitor.frames import (
    FrameDecodeError,
    decode_velocity_frame,
    read_velocity_stream,
    write_velocity_stream,
)


def test_decode_velocity_frame_accepts_text_decimals() -> None:
    assert decode_velocity_frame(b"0.25") == 0.25
    assert decode_velocity_frame(bytearray(b"-0.031\r\n")) == -0.031
    assert decode_velocity_frame(" 1.5\n") == 1.5


@pytest.mark.parametrize("payload", [b"", b"   ", b"abc", b"0.2.1", b"nan", b"inf", b"\xff\xfe"])
def test_decode_velocity_frame_rejects_malformed_payloads(payload: bytes) -> None:
    with pytest.raises(FrameDecodeError):
        decode_velocity_frame(payload)


def test_read_velocity_stream_skips_comments_and_counts_malformed_lines(tmp_path: Path) -> None:
    recording = tmp_path / "recording.txt"
    recording.write_text(
        "# doppler recording\n0.10\n\n0.22\nnot-a-number\n-0.05\n",
        encoding="utf-8",
    )

    stream = read_velocity_stream(recording)

    assert stream.velocities_m_s == [0.10, 0.22, -0.05]
    assert stream.malformed_lines == [5]
    assert stream.frame_count == 3


def test_read_velocity_stream_requires_existing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_velocity_stream(tmp_path / "missing.txt")


def test_written_stream_is_readable(tmp_path: Path) -> None:
    recording = tmp_path / "written.txt"

    write_velocity_stream(recording, [0.5, -0.125, 0.0])

    assert read_velocity_stream(recording).velocities_m_s == [0.5, -0.125, 0.0]
