# =============================================================================
# SVRE/SVM/__init__.py - Spectrum Verification Module
# =============================================================================
#
# Tools for checking that the render core still does what the frame format
# promises, without needing ffmpeg or a real audio file.
#
# Sub-modules:
#   validate.py        - self-check suite (python -m SVRE.SVM.validate)
#   spectrum_probe.py  - per-frame bar table for any audio file
#                        (python -m SVRE.SVM.spectrum_probe song.wav)
# =============================================================================
