#!/usr/bin/env python
import struct
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class SampleLoop:
    """One loop record of a `smpl` chunk."""
    cue_point_id: int
    loop_type: int
    start: int
    end: int
    fraction: int
    play_count: int


@dataclass(frozen=True)
class WavInfo:
    """Header fields and loop metadata read back from a WAV file."""
    format_code: int
    channels: int
    sample_rate: int
    bits_per_sample: int
    data_size: int
    riff_size: int
    midi_unity_note: int = 0
    sample_period_ns: int = 0
    loops: List[SampleLoop] = field(default_factory=list)

    @property
    def frame_count(self) -> int:
        block_align = self.channels * self.bits_per_sample // 8
        return self.data_size // block_align if block_align else 0

    @property
    def duration(self) -> float:
        return self.frame_count / self.sample_rate if self.sample_rate else 0.0


def iter_chunks(data: bytes) -> Iterator[Tuple[bytes, int, int]]:
    """
    Walk the chunks of a RIFF/WAVE image.

    Yields:
        (chunk id, payload offset, payload size); chunks are word aligned
    """
    if len(data) < 12 or data[0:4] != b"RIFF" or data[8:12] != b"WAVE":
        raise ValueError("Not a RIFF/WAVE file")
    offset = 12
    while offset + 8 <= len(data):
        chunk_id, size = struct.unpack_from("<4sI", data, offset)
        if offset + 8 + size > len(data):
            raise ValueError(f"Truncated {chunk_id!r} chunk")
        yield chunk_id, offset + 8, size
        offset += 8 + size + (size & 1)


def parse_wav(data: bytes) -> WavInfo:
    """
    Parse the fmt, data and smpl chunks of a WAV image.

    Raises:
        ValueError: If the image is not a WAV file or lacks fmt/data chunks
    """
    fmt = None
    data_size = None
    unity_note = 0
    sample_period = 0
    loops: List[SampleLoop] = []

    for chunk_id, start, size in iter_chunks(data):
        if chunk_id == b"fmt " and size >= 16:
            fmt = struct.unpack_from("<HHIIHH", data, start)
        elif chunk_id == b"data":
            data_size = size
        elif chunk_id == b"smpl" and size >= 36:
            header = struct.unpack_from("<9I", data, start)
            sample_period, unity_note, loop_count = header[2], header[3], header[7]
            loop_offset = start + 36
            for _ in range(loop_count):
                if loop_offset + 24 > start + size:
                    break
                loops.append(SampleLoop(*struct.unpack_from("<6I", data, loop_offset)))
                loop_offset += 24

    if fmt is None or data_size is None:
        raise ValueError("fmt/data chunk not found")

    format_code, channels, sample_rate, _, _, bits = fmt
    return WavInfo(
        format_code=format_code,
        channels=channels,
        sample_rate=sample_rate,
        bits_per_sample=bits,
        data_size=data_size,
        riff_size=struct.unpack_from("<I", data, 4)[0],
        midi_unity_note=unity_note,
        sample_period_ns=sample_period,
        loops=loops,
    )


def read_wav_info(path: Path) -> WavInfo:
    return parse_wav(Path(path).read_bytes())


def describe(path: Path, info: WavInfo) -> str:
    line = f"{path}: {info.duration:.3f} seconds, {info.channels}ch {info.sample_rate}Hz {info.bits_per_sample}-bit"
    if info.loops:
        spans = ", ".join(f"{loop.start}-{loop.end}" for loop in info.loops)
        line += f", loop {spans}"
    else:
        line += ", no loop"
    return line


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print("Usage: python wav_inspector.py <wav_file1> [<wav_file2> ...]")
        return 1

    status = 0
    for name in args:
        path = Path(name)
        if not path.exists():
            print(f"Error processing {path}: File does not exist", file=sys.stderr)
            status = 1
            continue
        try:
            print(describe(path, read_wav_info(path)))
        except ValueError as e:
            print(f"Error processing {path}: {e}", file=sys.stderr)
            status = 1
    return status


if __name__ == "__main__":
    sys.exit(main())
