#!/usr/bin/env python
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np

from models import LoopCandidate, WaveformBuffer


@dataclass(frozen=True)
class DetectionSettings:
    """
    Tuning constants for loop detection.

    The values are empirical. They are fixed in samples and do not scale
    with the buffer's sample rate.
    """
    # Distance kept between the last end probe and the end of the buffer
    tail_margin: int = 100
    # End probes at or below this offset are ignored
    probe_floor: int = 1000
    end_search_window: int = 2000
    start_search_window: int = 100
    # Snapped ends before this offset are too short to loop (0.5s at 44.1kHz)
    min_end_index: int = 22050
    min_loop_length: int = 1000
    start_probe_divisions: int = 100
    min_start_step: int = 10
    correlation_window: int = 500
    # Windows running past the buffer are clipped, down to this many samples
    min_correlation_overlap: int = 100
    score_scale: float = 200.0
    acceptance_threshold: float = 60.0
    max_candidates: int = 3


class LoopDetector:
    """
    Finds seamless loop points in a single channel of samples.

    For each of three end regions the end is snapped to a zero crossing, then
    about a hundred zero-crossing starts are scored by comparing the waveform
    after the start with the waveform after the end.
    """
    def __init__(self, settings: Optional[DetectionSettings] = None) -> None:
        self.settings = settings or DetectionSettings()

    def detect_buffer(self, buffer: WaveformBuffer) -> List[LoopCandidate]:
        """
        Detect loop points in the first channel of a buffer.

        Args:
            buffer: Decoded waveform

        Returns:
            Up to max_candidates candidates, best score first
        """
        return self.detect(buffer.channel(0), buffer.frame_count, buffer.sample_rate)

    def detect(self, samples: Union[np.ndarray, Sequence[float]], frame_count: int, sample_rate: int) -> List[LoopCandidate]:
        """
        Detect loop points in a sequence of samples.

        Args:
            samples: Mono samples in [-1.0, 1.0]
            frame_count: Number of samples to analyze
            sample_rate: Sample rate in Hz, only used for logging

        Returns:
            Up to max_candidates candidates sorted by descending score.
            An empty list means no region produced an acceptable loop.
        """
        cfg = self.settings
        data = np.asarray(samples, dtype=np.float64)[:frame_count]
        n = len(data)

        end_probes = [n - cfg.tail_margin, int(n * 0.75), int(n * 0.5)]
        end_probes = [p for p in end_probes if p > cfg.probe_floor]

        candidates: List[LoopCandidate] = []
        for probe in end_probes:
            end = self.find_zero_crossing(data, probe, cfg.end_search_window)
            if end < cfg.min_end_index:
                logging.debug(f"End probe {probe} snapped to {end}, below {cfg.min_end_index}; skipped")
                continue

            best_start, best_score = self._best_start_for(data, end)
            if best_score <= cfg.acceptance_threshold:
                logging.debug(f"Best start for end {end} scored {best_score:.1f}; rejected")
                continue

            loop_id = len(candidates) + 1
            candidates.append(LoopCandidate(
                id=loop_id,
                start=best_start,
                end=end,
                score=_round_half_up(best_score),
                label=f"Auto Loop {loop_id}",
            ))

        candidates.sort(key=lambda c: c.score, reverse=True)
        candidates = candidates[:cfg.max_candidates]

        seconds = n / sample_rate if sample_rate else 0.0
        logging.info(f"Loop detection over {n} samples ({seconds:.2f}s) found {len(candidates)} candidate(s)")
        return candidates

    def _best_start_for(self, data: np.ndarray, end: int):
        """Scan zero-crossing starts before `end` and return (start, raw score) of the best one."""
        cfg = self.settings
        max_start = end - cfg.min_loop_length
        step = max(cfg.min_start_step, end // cfg.start_probe_divisions)

        best_start = 0
        best_score = -1.0
        for probe in range(0, max_start, step):
            start = self.find_zero_crossing(data, probe, cfg.start_search_window)
            if start >= max_start:
                continue
            score = self.correlation_score(data, start, end, cfg.correlation_window)
            if score > best_score:
                best_score = score
                best_start = start
        return best_start, best_score

    @staticmethod
    def find_zero_crossing(data: np.ndarray, target: int, window: int) -> int:
        """
        Find the sign change closest to zero amplitude around a position.

        Args:
            data: Samples
            target: Position to search around
            window: Search radius in samples

        Returns:
            Index of the first crossing whose sample has the smallest magnitude
            (below 1.0), or `target` when the window holds no crossing
        """
        lo = max(0, target - window)
        hi = min(len(data) - 1, target + window)
        if hi <= lo:
            return target

        head = data[lo:hi]
        tail = data[lo + 1:hi + 1]
        crossing = ((head <= 0) & (tail > 0)) | ((head >= 0) & (tail < 0))
        magnitude = np.where(crossing, np.abs(head), np.inf)

        best = int(np.argmin(magnitude))
        if magnitude[best] < 1.0:
            return lo + best
        return target

    def correlation_score(self, data: np.ndarray, idx_a: int, idx_b: int, window: int) -> float:
        """
        Score how closely the waveform after two offsets matches.

        Args:
            data: Samples
            idx_a: First window offset
            idx_b: Second window offset
            window: Window length in samples

        Returns:
            0-100, 100 for identical windows. A window reaching past the
            buffer is shortened to the samples left; 0 when fewer than
            min_correlation_overlap remain
        """
        n = len(data)
        if idx_a < 0 or idx_b < 0:
            return 0.0
        length = min(window, n - idx_a, n - idx_b)
        if length <= 0 or length < min(window, self.settings.min_correlation_overlap):
            return 0.0

        diff = np.abs(data[idx_a:idx_a + length] - data[idx_b:idx_b + length])
        avg_diff = float(diff.sum()) / length
        return max(0.0, 100.0 - avg_diff * self.settings.score_scale)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
