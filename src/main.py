#!/usr/bin/env python
"""
Loop Master - Main Entry Point

Finds seamless loop points in audio files and exports WAV files that
carry the loop in a smpl chunk for samplers.
"""
import logging
import signal
import sys
import traceback
from typing import List, Optional

from app import LoopExportApp, parse_arguments
from fs import FS
from logging_manager import LoggingManager


def print_message(message: str, message_type: str) -> None:
    """
    Prints a message with a specific type indicator.

    :param message: The message to print.
    :param message_type: The type of message ('positive', 'negative', 'info').
    """
    color_map = {
        'positive': '\033[92m*',  # Green
        'negative': '\033[91m*',  # Red
        'info': '\033[94m*'       # Blue
    }
    marker = color_map.get(message_type, color_map['info'])
    print(f"\033[95m[ {marker} {message}\033[0m")


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for the application.

    Sets up logging and runs the selected action.
    """
    args = parse_arguments(argv)
    fs = FS(args.data_dir)

    logging_manager = LoggingManager(fs.logs_folder / "app.log")
    logging_manager.setup(level=logging.DEBUG if args.verbose else logging.INFO)

    status = 0
    try:
        app = LoopExportApp(args, fs)
        signal.signal(signal.SIGINT, app._handle_exit)
        status = app.run()
    except Exception as e:
        logging.error(f"Unhandled exception: {e}")
        logging.error(traceback.format_exc())
        print_message(f"Error: {e}", "negative")
        status = 1
    finally:
        logging_manager.shutdown()

    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
