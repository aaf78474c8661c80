#!/usr/bin/env python
import logging
import zipfile
from datetime import date
from pathlib import Path
from typing import Callable, Optional, Sequence, Set

from audio_processor import LoopProcessor, output_filename
from exceptions import AudioLoadError
from fs import FS
from loop_detector import LoopDetector
from wav_writer import WavWriter

ProgressCallback = Callable[[int, int], None]


def archive_name(day: Optional[date] = None) -> str:
    return f"LoopMaster_Batch_{(day or date.today()).isoformat()}.zip"


def unique_entry(name: str, taken: Set[str]) -> str:
    """Return `name`, or `name` with a numeric suffix, so no two archive entries collide."""
    candidate = name
    counter = 2
    while candidate.lower() in taken:
        stem = name[:-len(".wav")]
        candidate = f"{stem}_{counter}.wav"
        counter += 1
    taken.add(candidate.lower())
    return candidate


class BatchExporter:
    """
    Exports many audio files, each with its best loop, into one zip archive.

    Files are decoded one at a time; files that fail to decode are skipped.
    """
    def __init__(self, fs: FS, detector: Optional[LoopDetector] = None, writer: Optional[WavWriter] = None) -> None:
        self.fs = fs
        self.detector = detector or LoopDetector()
        self.writer = writer or WavWriter()

    def export_zip(
        self,
        files: Sequence[Path],
        archive_path: Optional[Path] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> Path:
        """
        Write every file into a zip archive of looped WAVs.

        Args:
            files: Audio files to process
            archive_path: Destination, defaults to a dated archive in the output folder
            progress: Called with (processed, total) after each file

        Returns:
            Path of the archive
        """
        archive_path = archive_path or self.fs.sound_output_folder / archive_name()
        written = 0
        taken: Set[str] = set()

        with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for processed, path in enumerate(files, start=1):
                try:
                    processor = LoopProcessor(path, self.fs, detector=self.detector, writer=self.writer)
                except AudioLoadError as e:
                    logging.warning(f"Skipping {Path(path).name} due to decode error: {e}")
                else:
                    processor.find_loop_points()
                    data = processor.render()
                    entry = unique_entry(output_filename(processor.stem), taken)
                    archive.writestr(entry, data)
                    written += 1
                    logging.info(f"Added {entry} to {archive_path.name}")

                if progress is not None:
                    progress(processed, len(files))

        logging.info(f"Batch archive {archive_path} written with {written} of {len(files)} file(s)")
        return archive_path
