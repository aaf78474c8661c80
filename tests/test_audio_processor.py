import numpy as np
import pytest

from audio_processor import LoopProcessor, load_waveform, output_filename
from conftest import SR, noise, sine
from exceptions import AudioLoadError, NoLoopSelectedError
from wav_inspector import read_wav_info


def test_output_filename():
    assert output_filename("organ") == "organ.wav"
    assert output_filename("organ.WAV") == "organ.WAV"


def test_load_keeps_channels_and_rate(fs, write_input):
    stereo = np.stack([sine(), sine(220.0)], axis=1)
    name = write_input("stereo.wav", stereo, sr=22050)

    buffer = load_waveform(fs.resolve_input(name))
    assert buffer.channel_count == 2
    assert buffer.sample_rate == 22050
    assert buffer.frame_count == len(stereo)


def test_missing_file(fs):
    with pytest.raises(AudioLoadError):
        LoopProcessor("nothing.wav", fs)


def test_undecodable_file(fs):
    (fs.sound_input_folder / "broken.wav").write_bytes(b"not audio at all")
    with pytest.raises(AudioLoadError):
        LoopProcessor("broken.wav", fs)


def test_detects_and_selects_best(fs, write_input):
    processor = LoopProcessor(write_input("sine.wav", sine()), fs)
    candidates = processor.find_loop_points()

    assert candidates
    assert processor.selected == candidates[0] == processor.get_best_loop()
    assert candidates[0].label.startswith("Auto Loop")


def test_short_file_loops_whole_buffer(fs, write_input):
    processor = LoopProcessor(write_input("blip.wav", sine(seconds=0.2)), fs)
    candidates = processor.find_loop_points()

    assert len(candidates) == 1
    assert (candidates[0].start, candidates[0].end) == (0, int(0.2 * SR) - 1)
    assert candidates[0].label == "Short Loop"


def test_no_detection_falls_back_to_whole_buffer(fs, write_input):
    processor = LoopProcessor(write_input("noise.wav", noise()), fs)
    candidates = processor.find_loop_points()

    assert len(candidates) == 1
    assert candidates[0].end == 2 * SR - 1


def test_select_out_of_range(fs, write_input):
    processor = LoopProcessor(write_input("sine.wav", sine()), fs)
    processor.find_loop_points()
    with pytest.raises(IndexError):
        processor.select_loop(5)


def test_adjust_keeps_score(fs, write_input):
    processor = LoopProcessor(write_input("sine.wav", sine()), fs)
    best = processor.find_loop_points()[0]

    edited = processor.adjust_loop(start=best.start + 7, end=best.end - 3)

    assert (edited.start, edited.end) == (best.start + 7, best.end - 3)
    assert edited.score == best.score
    assert processor.selected is edited
    assert processor.loop_candidates[0] is edited


def test_adjust_without_selection(fs, write_input):
    processor = LoopProcessor(write_input("sine.wav", sine()), fs)
    with pytest.raises(NoLoopSelectedError):
        processor.adjust_loop(start=0)


def test_render_requires_loop_when_asked(fs, write_input):
    processor = LoopProcessor(write_input("sine.wav", sine()), fs)
    with pytest.raises(NoLoopSelectedError):
        processor.render(require_loop=True)


def test_process_and_save(fs, write_input):
    processor = LoopProcessor(write_input("sine.wav", sine()), fs)
    result = processor.process_and_save("sine_loop")

    info = read_wav_info(result.destination)
    assert result.destination.endswith("sine_loop.wav")
    assert info.frame_count == 2 * SR
    assert (info.loops[0].start, info.loops[0].end) == (result.loop.start, result.loop.end)
    assert result.size == len(result.data)


def test_edits_past_the_buffer_are_clamped(fs, write_input):
    processor = LoopProcessor(write_input("sine.wav", sine()), fs)
    processor.find_loop_points()

    edited = processor.adjust_loop(end=10 * SR)
    assert edited.end == 2 * SR - 1
    assert processor.adjust_loop(start=-50).start == 0

    result = processor.process_and_save()
    loop = read_wav_info(result.destination).loops[0]
    assert (loop.start, loop.end) == (0, 2 * SR - 1)
