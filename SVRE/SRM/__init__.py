# =============================================================================
# SVRE/SRM/__init__.py - Spectrum Render Module
# =============================================================================
#
# Drives the whole run: one window in, one frame out, strictly in order.
#
# Sub-modules:
#   render_pipeline.py  - FrameRenderer, iter_frames(), render() driver
#   progress.py         - console progress bar
#   render.py           - command line entry point
#
#       python -m SVRE.SRM.render song.flac
#       python -m SVRE.SRM.render song.wav --mode pipe --bars 32 -o out.mp4
#
# State machine (render):
#   [start] validate config + fft size      → ConfigurationError / TransformError
#   [frame N] cancelled?                    → abort sink, Done (cancelled)
#             extract window, read == 0?    → Done (early)
#             transform → bars → pixels → sink.write(N) → progress(N + 1)
#   [done]   sink.finalize()
#   [error]  tag frame N, sink.abort(), re-raise
# =============================================================================
