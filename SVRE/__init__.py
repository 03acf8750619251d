# =============================================================================
# Spectrum Video Rendering Engine (SVRE)
# Turns a decoded audio file into a spectrum-bar video, frame by frame.
# =============================================================================
#
# ── PYTHON OWNS THE FRAME TIMELINE ───────────────────────────────────────────
#
# RESPONSIBLE for:
#   - Frame-to-Sample Slicing
#       Frame N covers samples [N * spf, (N + 1) * spf) where
#       spf = round(sample_rate / frame_rate).  44.1 kHz @ 30 fps = 1470.
#       The stream is read exactly once per frame, in frame order.
#   - Spectral Analysis
#       Unwindowed (rectangular) forward FFT of each window, zero-padded or
#       truncated to fft_size.
#   - Bar Mapping
#       Point-sampled bins -> dB -> [0, 1] -> boosted pixel height + colour.
#   - Deterministic Rasterization
#       Equal-width, bottom-aligned bars on a fresh black canvas.
#       Same audio + same settings = bit-identical frames.
#   - Frame hand-off in strict, gapless index order.
#
# NOT responsible for:
#   - Audio decoding           (soundfile / libsndfile)
#   - Frame image encoding     (OpenCV imwrite)
#   - Video / audio muxing     (ffmpeg child process)
#
# ── DATA FLOW ─────────────────────────────────────────────────────────────────
#   AudioStream → SampleCursor → window (spf floats)
#               → spectrum (fft_size complex)
#               → bars (bar_count × height/colour)
#               → pixels (height × width × RGB)
#               → FrameSink (PNG sequence or ffmpeg pipe)
#
# ── Module layout ─────────────────────────────────────────────────────────────
#   SMM/  Spectrum Mapping Module      - constants + RenderConfig
#   SAM/  Spectrum Analysis Module     - audio streams, windows, FFT
#   SGM/  Spectrum Graphics Module     - bar mapping + rasterizer
#   SEM/  Spectrum Export Module       - frame sinks + ffmpeg muxing
#   SRM/  Spectrum Render Module       - pipeline driver, progress, CLI
#   SVM/  Spectrum Verification Module - self-check suite + probe CLI
#   errors.py                          - fatal error hierarchy
# =============================================================================
