# =============================================================================
# SVRE/SMM/__init__.py - Spectrum Mapping Module
# =============================================================================
#
# The SMM is the single source of truth for every number that shapes a frame:
# canvas size, FFT size, frame rate, bar count, the dB window, the height
# boost, bar spacing and colours.
#
# Every numeric policy value used by SVRE is defined here and nowhere else.
#
# Sub-modules:
#   constants.py  - render defaults and mapping constants
#   config.py     - RenderConfig (immutable, validated run settings)
# =============================================================================
