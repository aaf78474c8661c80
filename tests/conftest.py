import numpy as np
import pytest
import soundfile as sf

from fs import FS
from models import WaveformBuffer

SR = 44100


def sine(frequency: float = 441.0, seconds: float = 2.0, sr: int = SR, amplitude: float = 0.8) -> np.ndarray:
    t = np.arange(int(seconds * sr)) / sr
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)


def noise(seconds: float = 2.0, sr: int = SR, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.uniform(-1.0, 1.0, int(seconds * sr)).astype(np.float32)


@pytest.fixture
def fs(tmp_path):
    return FS(tmp_path)


@pytest.fixture
def silent_buffer():
    return WaveformBuffer(channels=np.zeros((1, 2 * SR), dtype=np.float32), sample_rate=SR)


@pytest.fixture
def sine_buffer():
    return WaveformBuffer(channels=sine(), sample_rate=SR)


@pytest.fixture
def write_input(fs):
    """Write float samples as a 16-bit WAV into the input folder and return its name."""
    def _write(name: str, samples: np.ndarray, sr: int = SR) -> str:
        sf.write(str(fs.sound_input_folder / name), samples, sr, subtype="PCM_16")
        return name
    return _write
