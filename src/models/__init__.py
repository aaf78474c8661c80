from models.export_result import ExportResult
from models.loop_candidate import LoopCandidate
from models.waveform_buffer import WaveformBuffer

__all__ = ["ExportResult", "LoopCandidate", "WaveformBuffer"]
