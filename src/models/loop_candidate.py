from dataclasses import dataclass, replace

# Smallest gap kept between the two bounds when one of them is dragged.
EDIT_MIN_GAP = 100


@dataclass(frozen=True)
class LoopCandidate:
    """
    A pair of sample offsets that can be repeated as a seamless loop.

    Detection creates candidates; edits produce new values and keep the
    original score.
    """
    id: int
    start: int
    end: int
    score: int
    label: str

    @property
    def duration_samples(self) -> int:
        """Calculate loop duration in samples."""
        return self.end - self.start

    def duration_seconds(self, sr: int) -> float:
        """Calculate loop duration in seconds."""
        return self.duration_samples / sr

    def with_start(self, sample: int) -> "LoopCandidate":
        """
        Move the start bound the way a drag on the waveform does.

        Args:
            sample: Requested start offset

        Returns:
            New candidate whose start stays at least EDIT_MIN_GAP before the end
        """
        return replace(self, start=max(0, min(int(sample), self.end - EDIT_MIN_GAP)))

    def with_end(self, sample: int) -> "LoopCandidate":
        """
        Move the end bound the way a drag on the waveform does.

        Args:
            sample: Requested end offset

        Returns:
            New candidate whose end stays at least EDIT_MIN_GAP after the start
        """
        return replace(self, end=max(int(sample), self.start + EDIT_MIN_GAP))

    def with_bounds(self, start: int, end: int) -> "LoopCandidate":
        """Replace both bounds verbatim."""
        return replace(self, start=int(start), end=int(end))

    @classmethod
    def whole_buffer(cls, frame_count: int, label: str = "Short Loop") -> "LoopCandidate":
        """Loop covering every frame, used when detection has nothing to offer."""
        return cls(id=1, start=0, end=frame_count - 1, score=100, label=label)
