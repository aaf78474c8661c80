#!/usr/bin/env python
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

AUDIO_EXTENSIONS = ("wav", "flac", "ogg", "aiff", "mp3")


class FS:
    """
    Manages the data directory layout: logs, input audio and exported loops.
    """
    def __init__(self, root: Optional[Union[str, Path]] = None) -> None:
        self.root: Path = Path(root).resolve() if root is not None else self.get_project_root()
        self.data_folder: Path = self.root / "data"
        self.logs_folder: Path = self.data_folder / "logs"
        self.sound_folder: Path = self.data_folder / "sound"
        self.sound_input_folder: Path = self.sound_folder / "input"
        self.sound_output_folder: Path = self.sound_folder / "output"
        self.create_directories()

    def get_project_root(self) -> Path:
        """
        Determines the directory holding `data/` when no root is given.

        Returns:
            The current working directory
        """
        return Path.cwd().resolve()

    def create_directories(self) -> None:
        """
        Creates all necessary directories for the application if they don't exist.
        """
        required_folders = [
            self.data_folder,
            self.logs_folder,
            self.sound_folder,
            self.sound_input_folder,
            self.sound_output_folder,
        ]

        for folder in required_folders:
            folder.mkdir(parents=True, exist_ok=True)
            logging.debug(f"Ensured directory exists: {folder}")

    def resolve_input(self, name: Union[str, Path]) -> Path:
        """Resolve a file name against the input folder; absolute paths pass through."""
        return self.sound_input_folder / name

    def get_sound_input_files(self, extensions: Iterable[str] = AUDIO_EXTENSIONS) -> List[Path]:
        """
        Lists the audio files in the input folder.

        Args:
            extensions: File extensions to accept (without the dot, any case)

        Returns:
            Matching files sorted by name
        """
        wanted = {ext.lower().lstrip(".") for ext in extensions}
        return sorted(
            p for p in self.sound_input_folder.iterdir()
            if p.is_file() and p.suffix.lower().lstrip(".") in wanted
        )
