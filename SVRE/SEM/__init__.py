# =============================================================================
# SVRE/SEM/__init__.py - Spectrum Export Module
# =============================================================================
#
# Where finished frames go.  The render core only talks to the FrameSink
# contract (write / finalize / abort); how pixels become a video file is
# decided here.
#
# Modules:
#   frame_sink.py  - FrameSink base + MemoryFrameSink, PngSequenceSink
#                    (OpenCV), FfmpegPipeSink (raw rgb24 into ffmpeg stdin)
#   ffmpeg_mux.py  - ffmpeg discovery, command lines, PNG sequence + audio mux
#
# Two export flows:
#   png  : frames → TempFrames/frame%05d.png → ffmpeg mux → .mp4 → cleanup
#   pipe : frames → ffmpeg stdin (rawvideo) + audio file → .mp4
# =============================================================================
