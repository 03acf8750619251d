# =============================================================================
# SVRE/SGM/__init__.py - Spectrum Graphics Module
# =============================================================================
#
# Turns one frame's spectrum into pixels.  Pure functions only: no file I/O,
# no state carried from one frame to the next.
#
# Modules:
#   bar_mapper.py  - bin sampling, dB scaling, height boost, bar colours
#   rasterizer.py  - bar layout and the per-frame RGB canvas
#
# Constants live in SVRE/SMM/constants.py
# =============================================================================
