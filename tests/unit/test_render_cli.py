# pylint: disable=missing-module-docstring,missing-function-docstring

import os
import threading

import numpy as np
import pytest
import soundfile as sf

from SVRE.SMM.config import RenderConfig
from SVRE.SEM.frame_sink import MemoryFrameSink
from SVRE.SRM import render

SMALL = RenderConfig(width=64, height=36, fft_size=512, frame_rate=30, bar_count=8)


@pytest.fixture
def wav(tmp_path):
    path = tmp_path / "song.wav"
    rng = np.random.default_rng(9)
    sf.write(str(path), (rng.standard_normal((22_050, 2)) * 0.2).astype(np.float32),
             44_100, subtype="FLOAT")
    return str(path)


@pytest.fixture
def fake_mux(monkeypatch):
    calls = []

    def mux(frames_dir, audio_path, output_path, frame_rate, ffmpeg=None, pad_width=5):
        calls.append({
            "dir":    frames_dir,
            "files":  sorted(os.listdir(frames_dir)),
            "audio":  audio_path,
            "output": output_path,
            "fps":    frame_rate,
            "pad":    pad_width,
        })
        return output_path

    monkeypatch.setattr(render, "find_ffmpeg", lambda explicit=None: "ffmpeg")
    monkeypatch.setattr(render, "mux_png_sequence", mux)
    return calls


def test_png_mode_muxes_and_cleans_temp_dir(wav, tmp_path, fake_mux):
    out = str(tmp_path / "out.mp4")

    result = render.run_render(wav, out, SMALL, quiet=True)

    assert result.frames_rendered == 15
    assert result.output == out
    assert len(fake_mux) == 1
    call = fake_mux[0]
    assert call["files"][0] == "frame00000.png"
    assert len(call["files"]) == 15
    assert call["audio"] == wav
    assert call["fps"] == 30
    assert os.path.basename(call["dir"]).startswith("TempFrames_")
    assert not os.path.exists(call["dir"])


def test_keep_frames(wav, tmp_path, fake_mux):
    render.run_render(wav, str(tmp_path / "o.mp4"), SMALL, keep_frames=True, quiet=True)
    kept = fake_mux[0]["dir"]
    try:
        assert len(os.listdir(kept)) == 15
    finally:
        render.shutil.rmtree(kept, ignore_errors=True)


def test_user_frames_dir_is_never_deleted(wav, tmp_path, fake_mux):
    frames = tmp_path / "frames"
    render.run_render(wav, str(tmp_path / "o.mp4"), SMALL, frames_dir=str(frames), quiet=True)
    assert len(os.listdir(frames)) == 15


def test_pipe_mode_uses_pipe_sink(wav, tmp_path, fake_mux, monkeypatch):
    sinks = []

    def fake_pipe_sink(output_path, audio_path, width, height, frame_rate, ffmpeg=None):
        sinks.append((output_path, audio_path, width, height, frame_rate))
        return MemoryFrameSink()

    monkeypatch.setattr(render, "FfmpegPipeSink", fake_pipe_sink)
    out = str(tmp_path / "o.mp4")

    result = render.run_render(wav, out, SMALL, mode="pipe", quiet=True)

    assert sinks == [(out, wav, 64, 36, 30)]
    assert result.output == out
    assert result.frames_rendered == 15
    assert fake_mux == []


def test_cancelled_run_skips_mux(wav, tmp_path, fake_mux):
    cancel = threading.Event()
    cancel.set()

    result = render.run_render(wav, str(tmp_path / "o.mp4"), SMALL,
                               quiet=True, cancel_event=cancel)

    assert result.cancelled
    assert result.frames_rendered == 0
    assert fake_mux == []


def test_main_success(wav, tmp_path, fake_mux):
    out = str(tmp_path / "o.mp4")
    code = render.main([wav, "-o", out, "--width", "64", "--height", "36",
                        "--fft-size", "512", "--bars", "8", "--quiet"])
    assert code == 0
    assert fake_mux[0]["output"] == out


def test_main_reports_missing_audio(tmp_path, fake_mux, capsys):
    code = render.main([str(tmp_path / "missing.wav"), "--quiet"])
    assert code == 1
    assert "StreamReadError" in capsys.readouterr().err


def test_main_reports_bad_config(wav, fake_mux, capsys):
    code = render.main([wav, "--bars", "0", "--quiet"])
    assert code == 1
    assert "ConfigurationError" in capsys.readouterr().err


def test_parser_defaults():
    args = render.build_parser().parse_args(["a.wav"])
    assert args.output == "VisualizerWithAudio.mp4"
    assert (args.width, args.height, args.fft_size, args.fps, args.bars) == (1280, 720, 1024, 30, 64)
    assert args.mode == "png"


def test_reused_frames_dir_only_holds_this_run(wav, tmp_path, fake_mux):
    frames = tmp_path / "frames"
    frames.mkdir()
    for i in range(40):
        (frames / f"frame{i:05d}.png").write_bytes(b"from a longer render")

    result = render.run_render(wav, str(tmp_path / "o.mp4"), SMALL,
                               frames_dir=str(frames), quiet=True)

    assert result.frames_rendered == 15
    assert len(fake_mux[0]["files"]) == 15
    assert fake_mux[0]["files"][-1] == "frame00014.png"


def test_pipe_mode_with_no_samples_skips_encode(wav, tmp_path, fake_mux, monkeypatch, capsys):
    monkeypatch.setattr(render, "FfmpegPipeSink", lambda *args, **kwargs: MemoryFrameSink())
    monkeypatch.setattr(
        render, "render",
        lambda stream, config, sink, progress=None, cancel_event=None:
            render.RenderResult(0, 0, False, sink.finalize()),
    )

    result = render.run_render(wav, str(tmp_path / "o.mp4"), SMALL, mode="pipe")

    assert result.frames_rendered == 0
    assert result.output is None
    assert fake_mux == []
    assert "No audio samples were read" in capsys.readouterr().out
