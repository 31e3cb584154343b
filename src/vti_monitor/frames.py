from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

# GATT identifiers advertised by the Doppler transducer firmware.
VELOCITY_SERVICE_UUID = "4fafc201-1fb5-459e-8fcc-c5c9c331914b"
WAVEFORM_CHARACTERISTIC_UUID = "beb5483e-36e1-4688-b7f5-ea07361b26a8"


class FrameDecodeError(ValueError):
    """Raised when a notification payload is not a decimal velocity."""


@dataclass(frozen=True)
class VelocityStream:
    """Frames recovered from a recorded notification stream."""

    velocities_m_s: list[float]
    malformed_lines: list[int] = field(default_factory=list)

    @property
    def frame_count(self) -> int:
        return len(self.velocities_m_s)


def decode_velocity_frame(payload: bytes | bytearray | str) -> float:
    """Decode one characteristic notification: UTF-8 text holding m/s."""

    if isinstance(payload, (bytes, bytearray)):
        try:
            text = bytes(payload).decode("utf-8")
        except UnicodeDecodeError as error:
            raise FrameDecodeError("frame is not valid UTF-8") from error
    else:
        text = payload

    text = text.strip()
    if not text:
        raise FrameDecodeError("frame is empty")
    try:
        value = float(text)
    except ValueError as error:
        raise FrameDecodeError(f"frame is not a decimal number: {text!r}") from error
    if not math.isfinite(value):
        raise FrameDecodeError(f"frame must be finite: {text!r}")
    return value


def read_velocity_stream(path: str | Path) -> VelocityStream:
    """Read one frame per line; blank lines and ``#`` comments are skipped."""

    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(source)

    velocities: list[float] = []
    malformed: list[int] = []
    with source.open("r", encoding="utf-8", errors="replace") as file:
        for line_number, line in enumerate(file, start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            try:
                velocities.append(decode_velocity_frame(stripped))
            except FrameDecodeError as error:
                malformed.append(line_number)
                logger.warning(f"{source}:{line_number}: skipped frame ({error})")

    return VelocityStream(velocities_m_s=velocities, malformed_lines=malformed)


def write_velocity_stream(path: str | Path, velocities_m_s: list[float]) -> None:
    target = Path(path)
    with target.open("w", encoding="utf-8") as file:
        for velocity in velocities_m_s:
            file.write(f"{velocity:.6f}\n")
