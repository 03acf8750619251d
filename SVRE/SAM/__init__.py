# =============================================================================
# SVRE/SAM/__init__.py - Spectrum Analysis Module
# =============================================================================
#
# Everything between the decoded audio and the complex spectrum of one frame.
#
# Sub-modules:
#   audio_stream.py      - AudioStream contract + ArrayAudioStream and
#                          SoundFileStream (soundfile-backed) adapters
#   window_extractor.py  - SampleCursor and per-frame window extraction
#   spectral.py          - zero-pad/truncate + unwindowed forward FFT
#
# Pipeline per frame:
#   cursor.read_into(window) → read
#   build_spectrum_buffer(window, read, fft_size) → complex[fft_size]
#   forward_transform(buffer) → complex[fft_size]
# =============================================================================
