#!/usr/bin/env python
import logging
import struct
from typing import Optional

import numpy as np

from exceptions import LoopOutOfRangeError
from models import LoopCandidate, WaveformBuffer

PCM_FORMAT = 1
BIT_DEPTH = 16
BYTES_PER_SAMPLE = BIT_DEPTH // 8
FMT_CHUNK_SIZE = 16
# 36-byte sampler header followed by one 24-byte loop record
SMPL_CHUNK_SIZE = 36 + 24
MIDI_UNITY_NOTE = 60
LOOP_TYPE_FORWARD = 0
PLAY_COUNT_INFINITE = 0


def encode_pcm16(channels: np.ndarray) -> bytes:
    """
    Convert float channels to interleaved little-endian 16-bit PCM.

    Args:
        channels: Array of shape (channels, frames)

    Returns:
        Raw sample bytes, frame by frame
    """
    data = np.nan_to_num(np.asarray(channels, dtype=np.float64), nan=0.0)
    data = np.clip(data, -1.0, 1.0)
    scaled = np.where(data < 0, data * 32768.0, data * 32767.0)
    return scaled.astype(np.int16).T.astype("<i2").tobytes()


class WavWriter:
    """
    Builds RIFF/WAVE images with 16-bit PCM and an optional `smpl` loop chunk.

    The writer does no I/O: `write` returns the complete file as bytes.
    """
    def write(self, buffer: WaveformBuffer, loop: Optional[LoopCandidate] = None) -> bytes:
        """
        Encode a buffer as a WAV file.

        Args:
            buffer: Waveform to encode
            loop: Loop to embed in a `smpl` chunk, or None for a plain file

        Returns:
            The file contents

        Raises:
            LoopOutOfRangeError: If the loop does not fit inside the buffer
        """
        if loop is not None:
            self._validate_loop(buffer, loop)

        pcm = encode_pcm16(buffer.channels)
        riff_size = 4 + (8 + FMT_CHUNK_SIZE) + (8 + len(pcm))
        if loop is not None:
            riff_size += 8 + SMPL_CHUNK_SIZE

        chunks = [
            struct.pack("<4sI4s", b"RIFF", riff_size, b"WAVE"),
            self._fmt_chunk(buffer),
            struct.pack("<4sI", b"data", len(pcm)),
            pcm,
        ]
        if loop is not None:
            chunks.append(self._smpl_chunk(buffer, loop))

        image = b"".join(chunks)
        logging.debug(
            f"Encoded {buffer.frame_count} frames x {buffer.channel_count} channel(s) "
            f"at {buffer.sample_rate}Hz into {len(image)} bytes"
            + (f" with loop {loop.start}-{loop.end}" if loop is not None else "")
        )
        return image

    def _validate_loop(self, buffer: WaveformBuffer, loop: LoopCandidate) -> None:
        if loop.start < 0 or loop.end >= buffer.frame_count or loop.start >= loop.end:
            raise LoopOutOfRangeError(
                f"Loop {loop.start}-{loop.end} does not fit a buffer of {buffer.frame_count} frames"
            )

    def _fmt_chunk(self, buffer: WaveformBuffer) -> bytes:
        channels = buffer.channel_count
        rate = buffer.sample_rate
        return struct.pack(
            "<4sIHHIIHH",
            b"fmt ",
            FMT_CHUNK_SIZE,
            PCM_FORMAT,
            channels,
            rate,
            rate * channels * BYTES_PER_SAMPLE,
            channels * BYTES_PER_SAMPLE,
            BIT_DEPTH,
        )

    def _smpl_chunk(self, buffer: WaveformBuffer, loop: LoopCandidate) -> bytes:
        sample_period_ns = 1_000_000_000 // buffer.sample_rate
        header = struct.pack(
            "<4sI9I",
            b"smpl",
            SMPL_CHUNK_SIZE,
            0,                  # manufacturer
            0,                  # product
            sample_period_ns,
            MIDI_UNITY_NOTE,
            0,                  # pitch fraction
            0,                  # SMPTE format
            0,                  # SMPTE offset
            1,                  # loop count
            0,                  # sampler data size
        )
        loop_record = struct.pack(
            "<6I",
            0,                  # cue point id
            LOOP_TYPE_FORWARD,
            loop.start,
            loop.end,
            0,                  # fraction
            PLAY_COUNT_INFINITE,
        )
        return header + loop_record
