import numpy as np
import pytest

from conftest import SR, noise, sine
from loop_detector import DetectionSettings, LoopDetector
from models import WaveformBuffer


@pytest.fixture
def detector():
    return LoopDetector()


def assert_valid(candidates, frame_count):
    assert len(candidates) <= 3
    scores = [c.score for c in candidates]
    assert scores == sorted(scores, reverse=True)
    for c in candidates:
        assert 0 <= c.start < c.end <= frame_count - 1
        assert c.end - c.start >= 1000
        assert 0 <= c.score <= 100


class TestFindZeroCrossing:
    def test_picks_crossing_with_smallest_magnitude(self):
        data = np.array([0.5, 0.2, -0.1, -0.3, 0.05, 0.4])
        assert LoopDetector.find_zero_crossing(data, 2, 10) == 1

    def test_keeps_target_without_crossing(self):
        data = np.full(50, 0.3)
        assert LoopDetector.find_zero_crossing(data, 20, 10) == 20

    def test_full_scale_crossing_is_ignored(self):
        data = np.array([1.0, -1.0, -1.0])
        assert LoopDetector.find_zero_crossing(data, 1, 5) == 1

    def test_first_of_equal_crossings_wins(self):
        data = np.array([0.0, 0.5, 0.0, 0.5])
        assert LoopDetector.find_zero_crossing(data, 2, 5) == 0

    def test_window_is_bounded(self):
        data = np.array([0.0, 0.5] + [0.5] * 20 + [-0.5])
        # the only crossing near the target sits outside the window
        assert LoopDetector.find_zero_crossing(data, 15, 3) == 15


class TestCorrelationScore:
    def test_identical_windows_score_100(self, detector):
        data = np.tile(np.linspace(-0.5, 0.5, 50), 40)
        assert detector.correlation_score(data, 0, 1000, 500) == pytest.approx(100.0)

    def test_constant_offset(self, detector):
        data = np.concatenate([np.zeros(1000), np.full(1000, 0.1)])
        assert detector.correlation_score(data, 0, 1000, 500) == pytest.approx(80.0)

    def test_large_difference_floors_at_zero(self, detector):
        data = np.concatenate([np.full(1000, -0.5), np.full(1000, 0.5)])
        assert detector.correlation_score(data, 0, 1000, 500) == 0.0

    def test_negative_offset_scores_zero(self, detector):
        assert detector.correlation_score(np.zeros(2000), -1, 1000, 500) == 0.0

    def test_window_clipped_at_buffer_end(self, detector):
        data = np.zeros(1000)
        assert detector.correlation_score(data, 0, 900, 500) == pytest.approx(100.0)
        assert detector.correlation_score(data, 0, 950, 500) == 0.0

    def test_window_ending_at_buffer_end_is_full(self, detector):
        data = np.zeros(1000)
        data[500:] = 0.1
        assert detector.correlation_score(data, 0, 500, 500) == pytest.approx(80.0)


class TestDetect:
    def test_silence_accepts_every_region(self, detector, silent_buffer):
        candidates = detector.detect_buffer(silent_buffer)

        assert [c.end for c in candidates] == [2 * SR - 100, int(2 * SR * 0.75), int(2 * SR * 0.5)]
        assert all(c.score == 100 and c.start == 0 for c in candidates)
        assert [c.label for c in candidates] == ["Auto Loop 1", "Auto Loop 2", "Auto Loop 3"]

    def test_buffer_below_min_span_is_empty(self, detector):
        data = sine(seconds=0.45)
        assert len(data) < 22050
        assert detector.detect(data, len(data), SR) == []

    def test_tiny_buffer_is_empty(self, detector):
        assert detector.detect(np.zeros(500), 500, SR) == []

    def test_noise_yields_nothing(self, detector):
        data = noise()
        assert detector.detect(data, len(data), SR) == []

    def test_periodic_signal_loops(self, detector, sine_buffer):
        candidates = detector.detect_buffer(sine_buffer)

        assert candidates
        assert_valid(candidates, sine_buffer.frame_count)
        assert candidates[0].score > 60

    def test_deterministic(self, detector):
        data = sine(220.0) + 0.05 * noise(seed=3)
        first = detector.detect(data, len(data), SR)
        second = detector.detect(data.copy(), len(data), SR)
        assert first == second

    def test_only_first_channel_is_analyzed(self, detector, silent_buffer):
        stereo = WaveformBuffer(
            channels=np.stack([np.zeros(2 * SR, dtype=np.float32), noise()]),
            sample_rate=SR,
        )
        assert detector.detect_buffer(stereo) == detector.detect_buffer(silent_buffer)

    def test_frame_count_limits_analysis(self, detector):
        data = np.zeros(4 * SR)
        candidates = detector.detect(data, 2 * SR, SR)
        assert candidates[0].end == 2 * SR - 100

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_candidates_respect_bounds(self, detector, seed):
        data = sine(110.0 * seed, seconds=1.5) + 0.02 * noise(seconds=1.5, seed=seed)
        candidates = detector.detect(data, len(data), SR)
        assert_valid(candidates, len(data))
        assert all((c.start, c.end) != (0, 999) for c in candidates)

    def test_threshold_is_configurable(self):
        data = noise()
        lenient = LoopDetector(DetectionSettings(acceptance_threshold=-1.0))
        candidates = lenient.detect(data, len(data), SR)
        assert len(candidates) == 3
        assert_valid(candidates, len(data))
