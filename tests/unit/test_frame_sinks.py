# pylint: disable=missing-module-docstring,missing-function-docstring

import os

import cv2
import numpy as np
import pytest

from SVRE.errors import SinkWriteError
from SVRE.SEM import frame_sink
from SVRE.SEM.frame_sink import FfmpegPipeSink, MemoryFrameSink, PngSequenceSink


def _pixels(height=8, width=12, rgb=(128, 127, 50)):
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[height // 2:, :] = rgb
    return img


# ---------------------------------------------------------------------------
# Ordering guard (shared by every sink)
# ---------------------------------------------------------------------------

def test_memory_sink_collects_in_order():
    sink = MemoryFrameSink()
    for i in range(3):
        sink.write(i, _pixels())
    frames = sink.finalize()
    assert [f.index for f in frames] == [0, 1, 2]
    assert sink.frames_written == 3


@pytest.mark.parametrize("first", [1, -1, 5])
def test_first_frame_must_be_zero(first):
    with pytest.raises(SinkWriteError) as info:
        MemoryFrameSink().write(first, _pixels())
    assert info.value.frame_index == first


def test_gaps_and_repeats_are_rejected():
    sink = MemoryFrameSink()
    sink.write(0, _pixels())
    with pytest.raises(SinkWriteError):
        sink.write(0, _pixels())
    with pytest.raises(SinkWriteError):
        sink.write(2, _pixels())
    sink.write(1, _pixels())
    assert sink.frames_written == 2


def test_no_writes_after_finalize_or_abort():
    done = MemoryFrameSink()
    done.finalize()
    with pytest.raises(SinkWriteError):
        done.write(0, _pixels())
    with pytest.raises(SinkWriteError):
        done.finalize()

    aborted = MemoryFrameSink()
    aborted.write(0, _pixels())
    aborted.abort()
    aborted.abort()
    assert aborted.frames == []
    with pytest.raises(SinkWriteError):
        aborted.write(1, _pixels())


# ---------------------------------------------------------------------------
# PNG sequence
# ---------------------------------------------------------------------------

def test_png_sink_writes_numbered_rgb_frames(tmp_path):
    out = tmp_path / "frames"
    sink = PngSequenceSink(str(out))

    sink.write(0, _pixels())
    sink.write(1, _pixels(rgb=(255, 0, 50)))

    assert sink.finalize() == str(out)
    assert sorted(os.listdir(out)) == ["frame00000.png", "frame00001.png"]

    bgr = cv2.imread(str(out / "frame00000.png"))
    assert bgr.shape == (8, 12, 3)
    assert tuple(int(c) for c in bgr[7, 0]) == (50, 127, 128)
    assert tuple(int(c) for c in bgr[0, 0]) == (0, 0, 0)


def test_png_sink_custom_padding(tmp_path):
    sink = PngSequenceSink(str(tmp_path), pad_width=6)
    sink.write(0, _pixels())
    assert os.path.exists(tmp_path / "frame000000.png")


def test_png_sink_abort_removes_created_directory(tmp_path):
    out = tmp_path / "frames"
    sink = PngSequenceSink(str(out))
    sink.write(0, _pixels())
    sink.write(1, _pixels())

    sink.abort()

    assert not out.exists()


def test_png_sink_abort_keeps_existing_directory(tmp_path):
    keep = tmp_path / "mine.txt"
    keep.write_text("not a frame")
    sink = PngSequenceSink(str(tmp_path))
    sink.write(0, _pixels())

    sink.abort()

    assert tmp_path.exists()
    assert keep.exists()
    assert not (tmp_path / "frame00000.png").exists()


def test_png_sink_reports_failed_write(tmp_path, monkeypatch):
    monkeypatch.setattr(frame_sink.cv2, "imwrite", lambda path, img: False)
    sink = PngSequenceSink(str(tmp_path))
    with pytest.raises(SinkWriteError) as info:
        sink.write(0, _pixels())
    assert info.value.frame_index == 0


# ---------------------------------------------------------------------------
# ffmpeg pipe (subprocess faked)
# ---------------------------------------------------------------------------

class FakeStdin:

    def __init__(self):
        self.data   = bytearray()
        self.closed = False
        self.broken = False

    def write(self, chunk):
        if self.broken:
            raise BrokenPipeError(32, "Broken pipe")
        self.data.extend(chunk)

    def close(self):
        self.closed = True


class FakePopen:
    exit_code = 0
    last      = None

    def __init__(self, cmd, stdin=None, stdout=None, stderr=None):
        self.cmd        = cmd
        self.stdin      = FakeStdin()
        self.returncode = None
        self.killed     = False
        if stderr is not None and hasattr(stderr, "write"):
            stderr.write(b"Unknown encoder 'libx264'")
        FakePopen.last = self

    def poll(self):
        return self.returncode

    def wait(self):
        self.returncode = -9 if self.killed else FakePopen.exit_code
        return self.returncode

    def kill(self):
        self.killed = True


@pytest.fixture
def fake_ffmpeg(monkeypatch):
    FakePopen.exit_code = 0
    FakePopen.last = None
    monkeypatch.setattr(frame_sink, "find_ffmpeg", lambda explicit=None: "/opt/ffmpeg")
    monkeypatch.setattr(frame_sink.subprocess, "Popen", FakePopen)
    return FakePopen


def test_pipe_sink_streams_raw_rgb(tmp_path, fake_ffmpeg):
    out = str(tmp_path / "out.mp4")
    sink = FfmpegPipeSink(out, "song.wav", 12, 8, 30)

    sink.write(0, _pixels())
    sink.write(1, _pixels())

    proc = fake_ffmpeg.last
    assert proc.cmd[0] == "/opt/ffmpeg"
    assert "1280x720" not in proc.cmd and "12x8" in proc.cmd
    assert len(proc.stdin.data) == 2 * 8 * 12 * 3
    assert sink.finalize() == out
    assert proc.stdin.closed


def test_pipe_sink_rejects_wrong_shape(tmp_path, fake_ffmpeg):
    sink = FfmpegPipeSink(str(tmp_path / "o.mp4"), "a.wav", 12, 8, 30)
    with pytest.raises(SinkWriteError):
        sink.write(0, _pixels(height=9))


def test_pipe_sink_broken_pipe(tmp_path, fake_ffmpeg):
    sink = FfmpegPipeSink(str(tmp_path / "o.mp4"), "a.wav", 12, 8, 30)
    fake_ffmpeg.last.stdin.broken = True

    with pytest.raises(SinkWriteError) as info:
        sink.write(0, _pixels())

    assert info.value.frame_index == 0
    assert "libx264" in str(info.value)


def test_pipe_sink_nonzero_exit(tmp_path, fake_ffmpeg):
    fake_ffmpeg.exit_code = 1
    sink = FfmpegPipeSink(str(tmp_path / "o.mp4"), "a.wav", 12, 8, 30)
    sink.write(0, _pixels())

    with pytest.raises(SinkWriteError) as info:
        sink.finalize()
    assert "exited with 1" in str(info.value)


def test_pipe_sink_abort_kills_and_removes_output(tmp_path, fake_ffmpeg):
    out = tmp_path / "o.mp4"
    sink = FfmpegPipeSink(str(out), "a.wav", 12, 8, 30)
    sink.write(0, _pixels())
    out.write_bytes(b"partial")

    sink.abort()

    assert fake_ffmpeg.last.killed
    assert not out.exists()


def test_png_sink_clears_frames_from_an_earlier_run(tmp_path):
    for i in range(40):
        (tmp_path / f"frame{i:05d}.png").write_bytes(b"old")
    (tmp_path / "frame000040.png").write_bytes(b"old, wider padding")
    (tmp_path / "notes.txt").write_text("keep me")
    (tmp_path / "frame_cover.png").write_bytes(b"not part of a sequence")

    sink = PngSequenceSink(str(tmp_path))
    sink.write(0, _pixels())
    sink.write(1, _pixels())
    sink.finalize()

    frames = sorted(n for n in os.listdir(tmp_path) if frame_sink.FRAME_FILE_RE.fullmatch(n))
    assert frames == ["frame00000.png", "frame00001.png"]
    assert (tmp_path / "notes.txt").exists()
    assert (tmp_path / "frame_cover.png").exists()


def test_pipe_sink_without_frames_encodes_nothing(tmp_path, fake_ffmpeg):
    out = tmp_path / "o.mp4"
    sink = FfmpegPipeSink(str(out), "a.wav", 12, 8, 30)
    out.write_bytes(b"header only")

    assert sink.finalize() is None
    assert fake_ffmpeg.last.killed
    assert not out.exists()
