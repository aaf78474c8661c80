import zipfile
from datetime import date

from batch import BatchExporter, archive_name, unique_entry
from conftest import sine
from wav_inspector import parse_wav


def test_archive_name():
    assert archive_name(date(2024, 3, 9)) == "LoopMaster_Batch_2024-03-09.zip"


def test_unique_entry():
    taken = set()
    assert unique_entry("a.wav", taken) == "a.wav"
    assert unique_entry("A.wav", taken) == "A_2.wav"
    assert unique_entry("a.wav", taken) == "a_3.wav"


def test_export_zip_skips_broken_files(fs, write_input):
    write_input("one.wav", sine())
    write_input("two.flac", sine(220.0, seconds=0.3))
    (fs.sound_input_folder / "zz_broken.wav").write_bytes(b"garbage")
    files = fs.get_sound_input_files()
    calls = []

    archive = BatchExporter(fs).export_zip(files, progress=lambda done, total: calls.append((done, total)))

    assert archive.parent == fs.sound_output_folder
    assert calls == [(1, 3), (2, 3), (3, 3)]
    with zipfile.ZipFile(archive) as zf:
        assert sorted(zf.namelist()) == ["one.wav", "two.wav"]
        short = parse_wav(zf.read("two.wav"))
        assert (short.loops[0].start, short.loops[0].end) == (0, short.frame_count - 1)
        assert parse_wav(zf.read("one.wav")).loops


def test_export_zip_custom_path(fs, write_input, tmp_path):
    write_input("a.wav", sine())
    target = tmp_path / "out.zip"
    assert BatchExporter(fs).export_zip(fs.get_sound_input_files(), archive_path=target) == target
    assert zipfile.is_zipfile(target)
