# =============================================================================
# constants.py - SMM Render Constants
# =============================================================================
#
# Every value here changes the rendered pixels.  Two runs with the same audio
# and the same constants MUST produce bit-identical frames, so nothing in the
# pipeline may read a value that is not defined here or in RenderConfig.

# -----------------------------------------------------------------------------
# RENDER DEFAULTS  (used when the CLI is not told otherwise)
# -----------------------------------------------------------------------------

DEFAULT_WIDTH      = 1280       # px
DEFAULT_HEIGHT     = 720        # px
DEFAULT_FFT_SIZE   = 1024       # transform length (samples)
DEFAULT_FRAME_RATE = 30         # frames per second
DEFAULT_BAR_COUNT  = 64         # visual columns

DEFAULT_OUTPUT_NAME = "VisualizerWithAudio.mp4"


# -----------------------------------------------------------------------------
# SPECTRUM → BAR MAPPING
# -----------------------------------------------------------------------------
# db         = 20 * log10(magnitude / fft_size + DB_EPSILON)
# normalized = clamp((db - DB_FLOOR) / DB_RANGE, 0, 1)
# height_px  = clamp(round(normalized * height * HEIGHT_BOOST), 0, height)
#
# -100 dB maps to 0.0, 0 dB maps to 1.0.  Anything outside saturates.

DB_EPSILON   = 1e-9     # keeps log10 away from 0
DB_FLOOR     = -100.0   # dB → normalized 0.0
DB_RANGE     = 100.0    # dB span → normalized 1.0
HEIGHT_BOOST = 1.2      # applied after normalization, then re-clamped

# Silence lands at 20 * log10(1e-9) = -180 dB, well below DB_FLOOR.
SILENCE_DB   = -180.0


# -----------------------------------------------------------------------------
# BAR COLOURS  (RGBA, 8 bit per channel)
# -----------------------------------------------------------------------------
# red   = round(normalized * 255)
# green = 255 - red
# blue  = BAR_BLUE   (fixed)
# Colour follows `normalized`, not the boosted pixel height.

COLOR_MAX  = 255
BAR_BLUE   = 50
BAR_ALPHA  = 255

BACKGROUND_RGB = (0, 0, 0)   # canvas clear colour (black)


# -----------------------------------------------------------------------------
# LAYOUT
# -----------------------------------------------------------------------------
# bar_width = width // bar_count   (remainder = unused right margin)
# rect      = [i * bar_width, i * bar_width + bar_width - BAR_GAP_PX)

BAR_GAP_PX = 2


# -----------------------------------------------------------------------------
# FRAME NAMING  (must match the ffmpeg input pattern)
# -----------------------------------------------------------------------------

FRAME_PREFIX    = "frame"
FRAME_EXTENSION = ".png"
FRAME_PAD_WIDTH = 5          # frame00000.png … frame99999.png

# -----------------------------------------------------------------------------
# ENCODER  (ffmpeg argument set of the two-stage PNG → MP4 flow)
# -----------------------------------------------------------------------------

VIDEO_CODEC   = "libx264"
PIXEL_FORMAT  = "yuv420p"
AUDIO_CODEC   = "flac"
RAW_PIXEL_FMT = "rgb24"      # ffmpeg name for height × width × 3 uint8 frames

FFMPEG_ENV_VAR = "FFMPEG"

# -----------------------------------------------------------------------------
# CONSOLE
# -----------------------------------------------------------------------------

PROGRESS_BAR_WIDTH = 50      # characters between the brackets
