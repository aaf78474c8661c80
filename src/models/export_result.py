from dataclasses import dataclass
from typing import Optional

from models.loop_candidate import LoopCandidate


@dataclass(frozen=True)
class ExportResult:
    """Immutable record of one exported WAV file."""
    data: bytes
    destination: str
    loop: Optional[LoopCandidate]

    @property
    def size(self) -> int:
        return len(self.data)
