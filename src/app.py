#!/usr/bin/env python
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.progress import Progress
from rich.table import Table

from audio_processor import LoopProcessor
from batch import BatchExporter
from exceptions import AudioLoadError
from fs import FS
from loop_detector import LoopDetector
from models import LoopCandidate
from wav_inspector import describe, read_wav_info


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Find seamless loop points and export WAV files with smpl loop metadata.",
        epilog="Example usage: loop-master --audio organ.wav --candidate 2 --name organ_loop"
    )
    parser.add_argument(
        "--audio",
        type=str,
        default=None,
        help="Audio file to process; relative names resolve in data/sound/input (default: None)"
    )
    parser.add_argument(
        "--batch",
        action="store_true",
        help="Export every file in data/sound/input into one zip archive"
    )
    parser.add_argument(
        "--candidate",
        type=int,
        default=1,
        help="1-based index of the loop candidate to export (default: 1)"
    )
    parser.add_argument(
        "--loop-start",
        type=int,
        default=None,
        help="Move the chosen loop's start to this sample"
    )
    parser.add_argument(
        "--loop-end",
        type=int,
        default=None,
        help="Move the chosen loop's end to this sample"
    )
    parser.add_argument(
        "--name",
        type=str,
        default=None,
        help="Output file name (default: the input file's name)"
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Only list the loop candidates, do not export"
    )
    parser.add_argument(
        "--inspect",
        nargs="+",
        default=None,
        metavar="WAV",
        help="Print format and loop metadata of WAV files"
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Directory holding data/ (default: current directory)"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level"
    )
    return parser.parse_args(argv)


class LoopExportApp:
    """
    Command line front end: analyze, edit and export loops.
    """
    def __init__(self, args: argparse.Namespace, fs: FS, console: Optional[Console] = None) -> None:
        self.args = args
        self.fs = fs
        self.console = console or Console()
        self.detector = LoopDetector()
        logging.info(f"Data directory: {self.fs.data_folder}")

    def _handle_exit(self, signum, frame) -> None:
        """
        Handle clean exit on keyboard interrupt.
        """
        self.console.print("\n[bold yellow]Exiting cleanly. Goodbye![/bold yellow]")
        sys.exit(0)

    def run(self) -> int:
        """
        Run the action selected on the command line.

        Returns:
            Process exit status
        """
        if self.args.inspect:
            return self.inspect(self.args.inspect)
        if self.args.batch:
            return self.export_batch()

        audio_file = self.args.audio or self._interactive_mode()
        if audio_file is None:
            return 1
        return self.export_single(audio_file)

    def _interactive_mode(self) -> Optional[Path]:
        files = self.fs.get_sound_input_files()
        if not files:
            self.console.print(f"[bold red]No audio files found in {self.fs.sound_input_folder}.[/bold red]")
            self.console.print("Please add audio files to the folder and re-run the program.")
            return None

        table = Table(title="Available Audio Files")
        table.add_column("Index", justify="right", style="cyan", no_wrap=True)
        table.add_column("File Name", style="magenta")
        for idx, file in enumerate(files, start=1):
            table.add_row(str(idx), file.name)
        self.console.print(table)

        while True:
            try:
                choice = int(self.console.input("[bold green]Select a file by index: [/bold green]"))
                if 1 <= choice <= len(files):
                    return files[choice - 1]
                self.console.print("[bold red]Invalid choice. Try again.[/bold red]")
            except ValueError:
                self.console.print("[bold red]Please enter a valid number.[/bold red]")

    def candidates_table(self, title: str, candidates: List[LoopCandidate], sr: int) -> Table:
        table = Table(title=title)
        table.add_column("#", justify="right", style="cyan", no_wrap=True)
        table.add_column("Label", style="magenta")
        table.add_column("Start", justify="right")
        table.add_column("End", justify="right")
        table.add_column("Length", justify="right")
        table.add_column("Score", justify="right", style="green")
        for idx, c in enumerate(candidates, start=1):
            table.add_row(
                str(idx),
                c.label,
                str(c.start),
                str(c.end),
                f"{c.duration_seconds(sr):.3f}s",
                str(c.score),
            )
        return table

    def export_single(self, audio_file) -> int:
        try:
            processor = LoopProcessor(audio_file, self.fs, detector=self.detector)
        except AudioLoadError as e:
            self.console.print(f"[bold red]Error loading audio: {e}[/bold red]")
            return 1

        with self.console.status("[cyan]Finding seamless loop points..."):
            candidates = processor.find_loop_points()

        if candidates:
            self.console.print(self.candidates_table(processor.audio_file.name, candidates, processor.buffer.sample_rate))
        else:
            self.console.print("[bold yellow]Audio too short for a loop; exporting without loop metadata.[/bold yellow]")

        if self.args.list:
            return 0

        if candidates:
            try:
                processor.select_loop(self.args.candidate - 1)
            except IndexError as e:
                self.console.print(f"[bold red]{e}[/bold red]")
                return 1
            if self.args.loop_start is not None or self.args.loop_end is not None:
                edited = processor.adjust_loop(self.args.loop_start, self.args.loop_end)
                self.console.print(f"[*] Loop adjusted to {edited.start}-{edited.end} (score kept at {edited.score})")

        try:
            result = processor.process_and_save(self.args.name)
        except ValueError as e:
            self.console.print(f"[bold red]Export failed: {e}[/bold red]")
            return 1

        self.console.print(f"[*] Looped file saved: {result.destination}")
        return 0

    def export_batch(self) -> int:
        files = self.fs.get_sound_input_files()
        if not files:
            self.console.print(f"[bold red]No audio files found in {self.fs.sound_input_folder}.[/bold red]")
            return 1

        exporter = BatchExporter(self.fs, detector=self.detector)
        with Progress(console=self.console) as progress:
            task = progress.add_task("[cyan]Exporting loops...", total=len(files))
            archive = exporter.export_zip(
                files,
                progress=lambda done, total: progress.update(task, completed=done),
            )
        self.console.print(f"[*] Batch archive saved: {archive}")
        return 0

    def inspect(self, paths: List[str]) -> int:
        status = 0
        for name in paths:
            path = Path(name)
            try:
                self.console.print(describe(path, read_wav_info(path)))
            except (OSError, ValueError) as e:
                self.console.print(f"[bold red]Error processing {path}: {e}[/bold red]")
                status = 1
        return status
