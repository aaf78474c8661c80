#!/usr/bin/env python
import gzip
import logging.handlers
import shutil
from pathlib import Path
from typing import List


class CompressingRotatingFileHandler(logging.handlers.RotatingFileHandler):
    """
    A rotating file handler that gzips rotated logs.

    The newest archive is `<log>.1.gz`; at most backupCount archives are kept.
    """

    def archive_path(self, index: int) -> Path:
        return Path(f"{self.baseFilename}.{index}.gz")

    def doRollover(self) -> None:
        if self.stream:
            self.stream.close()
            self.stream = None

        if self.backupCount > 0:
            for i in range(self.backupCount - 1, 0, -1):
                archive = self.archive_path(i)
                if archive.exists():
                    archive.replace(self.archive_path(i + 1))

            current = Path(self.baseFilename)
            if current.exists():
                rotated = Path(f"{self.baseFilename}.1")
                current.replace(rotated)
                self.compress_log(rotated)

        self.mode = "w"
        self.stream = self._open()
        self.prune_archives()

    def compress_log(self, path: Path) -> None:
        with path.open("rb") as f_in, gzip.open(f"{path}.gz", "wb") as f_out:
            shutil.copyfileobj(f_in, f_out)
        path.unlink()

    def archives(self) -> List[Path]:
        """Existing archives, newest first."""
        base = Path(self.baseFilename)
        found = []
        for path in base.parent.glob(f"{base.name}.*.gz"):
            index = path.name[len(base.name) + 1:-len(".gz")]
            if index.isdigit():
                found.append((int(index), path))
        return [path for _, path in sorted(found)]

    def prune_archives(self) -> None:
        for stale in self.archives()[self.backupCount:]:
            stale.unlink()
