#!/usr/bin/env python
import logging
from pathlib import Path
from typing import List, Optional, Union

import librosa
import numpy as np

from exceptions import AudioLoadError, NoLoopSelectedError
from fs import FS
from loop_detector import LoopDetector
from models import ExportResult, LoopCandidate, WaveformBuffer
from wav_writer import WavWriter

# Buffers this short skip detection and loop as a whole
MIN_DETECTION_DURATION_SEC = 0.5


def load_waveform(path: Union[str, Path]) -> WaveformBuffer:
    """
    Decode an audio file at its native sample rate, keeping every channel.

    Raises:
        AudioLoadError: If the file is missing, cannot be decoded or is empty
    """
    path = Path(path)
    if not path.exists():
        raise AudioLoadError(f"Audio file not found: {path}")

    try:
        y, sr = librosa.load(path, sr=None, mono=False)
    except Exception as e:
        raise AudioLoadError(f"{path.name} could not be loaded: {e}") from e

    if y.size == 0:
        raise AudioLoadError(f'No audio data could be loaded from "{path}".')

    return WaveformBuffer(channels=np.atleast_2d(y), sample_rate=sr)


def output_filename(name: str) -> str:
    """Append the .wav suffix unless the name already carries it."""
    return name if name.lower().endswith(".wav") else f"{name}.wav"


class LoopProcessor:
    """
    One loop-editing session for an audio file:
    - Finding seamless loop points (with a whole-buffer fallback)
    - Selecting and drag-adjusting a loop
    - Exporting a WAV that carries the loop in a smpl chunk
    """
    def __init__(
        self,
        audio_file: Union[str, Path],
        fs: FS,
        detector: Optional[LoopDetector] = None,
        writer: Optional[WavWriter] = None,
    ) -> None:
        """
        Load an audio file and prepare a session.

        Args:
            audio_file: File name inside the input folder, or an absolute path
            fs: File system manager
            detector: Loop detector, default settings when omitted
            writer: WAV writer
        """
        self.fs = fs
        self.audio_file: Path = fs.resolve_input(audio_file)
        self.detector = detector or LoopDetector()
        self.writer = writer or WavWriter()
        self.buffer: WaveformBuffer = load_waveform(self.audio_file)
        self.loop_candidates: List[LoopCandidate] = []
        self.selected: Optional[LoopCandidate] = None
        logging.info(
            f"Loaded {self.audio_file.name}: {self.buffer.duration:.2f}s, "
            f"{self.buffer.channel_count} channel(s) at {self.buffer.sample_rate}Hz"
        )

    @property
    def stem(self) -> str:
        return self.audio_file.stem

    def find_loop_points(self) -> List[LoopCandidate]:
        """
        Detect loop candidates and select the best one.

        Short buffers, and buffers where detection finds nothing, get a single
        loop spanning the whole buffer. Buffers under two frames get none.

        Returns:
            Candidates, best first
        """
        candidates: List[LoopCandidate] = []
        if self.buffer.duration > MIN_DETECTION_DURATION_SEC:
            candidates = self.detector.detect_buffer(self.buffer)

        if not candidates and self.buffer.frame_count >= 2:
            logging.info(f"No loop detected in {self.audio_file.name}; using the whole buffer")
            candidates = [LoopCandidate.whole_buffer(self.buffer.frame_count)]

        self.loop_candidates = candidates
        self.selected = candidates[0] if candidates else None
        return self.loop_candidates

    def get_best_loop(self) -> Optional[LoopCandidate]:
        """
        Get the best loop candidate (highest score).

        Returns:
            Best LoopCandidate or None if no candidates available
        """
        if not self.loop_candidates:
            return None
        return self.loop_candidates[0]

    def select_loop(self, index: int) -> LoopCandidate:
        """
        Select a candidate by its position in the ranked list.

        Raises:
            IndexError: If there is no candidate at that position
        """
        if not 0 <= index < len(self.loop_candidates):
            raise IndexError(f"No loop candidate #{index + 1}; {len(self.loop_candidates)} available")
        self.selected = self.loop_candidates[index]
        return self.selected

    def adjust_loop(self, start: Optional[int] = None, end: Optional[int] = None) -> LoopCandidate:
        """
        Drag the selected loop's bounds. The score is kept, not recomputed.
        Positions are clamped to the buffer like a drag on the waveform.

        Args:
            start: New start sample, or None to keep it
            end: New end sample, or None to keep it

        Returns:
            The edited candidate, which becomes the selection

        Raises:
            NoLoopSelectedError: If nothing is selected
        """
        if self.selected is None:
            raise NoLoopSelectedError(f"No loop selected for {self.audio_file.name}")

        last_frame = self.buffer.frame_count - 1
        edited = self.selected
        if start is not None:
            edited = edited.with_start(max(0, min(start, last_frame)))
        if end is not None:
            edited = edited.with_end(max(0, min(end, last_frame)))

        self.loop_candidates = [edited if c is self.selected else c for c in self.loop_candidates]
        self.selected = edited
        logging.info(f"Adjusted loop '{edited.label}' to {edited.start}-{edited.end}")
        return edited

    def render(self, require_loop: bool = False) -> bytes:
        """
        Encode the buffer with the selected loop.

        Args:
            require_loop: Fail instead of writing a plain WAV when nothing is selected

        Raises:
            NoLoopSelectedError: If require_loop is set and no loop is selected
            LoopOutOfRangeError: If the selected loop does not fit the buffer
        """
        if self.selected is None and require_loop:
            raise NoLoopSelectedError(f"No loop selected for {self.audio_file.name}")
        return self.writer.write(self.buffer, self.selected)

    def process_and_save(self, output_file: Optional[str] = None) -> ExportResult:
        """
        Export the selected loop to the output folder.

        Args:
            output_file: Output name, defaults to the input file's stem; `.wav` is appended when missing

        Returns:
            ExportResult describing the written file
        """
        if not self.loop_candidates:
            self.find_loop_points()

        data = self.render()
        output_path = self.fs.sound_output_folder / output_filename(output_file or self.stem)
        output_path.write_bytes(data)

        if self.selected is not None:
            logging.info(f"Saved {output_path} with loop {self.selected.start}-{self.selected.end}")
        else:
            logging.warning(f"Saved {output_path} without loop metadata")

        return ExportResult(data=data, destination=str(output_path), loop=self.selected)
