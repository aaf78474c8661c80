from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass(frozen=True, eq=False)
class WaveformBuffer:
    """
    Decoded audio held as a read-only (channels, frames) float array.
    """
    channels: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        data = np.atleast_2d(np.array(self.channels, dtype=np.float32))
        if data.ndim != 2:
            raise ValueError(f"Expected a (channels, frames) array, got shape {data.shape}")
        data.setflags(write=False)
        object.__setattr__(self, "channels", data)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    @classmethod
    def from_channels(cls, channels: Sequence[Sequence[float]], sample_rate: int) -> "WaveformBuffer":
        return cls(channels=np.asarray(channels, dtype=np.float32), sample_rate=sample_rate)

    @property
    def channel_count(self) -> int:
        return self.channels.shape[0]

    @property
    def frame_count(self) -> int:
        return self.channels.shape[1]

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return self.frame_count / self.sample_rate

    def channel(self, index: int = 0) -> np.ndarray:
        return self.channels[index]
