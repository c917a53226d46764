# =============================================================================
# constants.py - SMM Capture Constants and Sync Pattern
# =============================================================================
#
# Every value the recovery pipeline depends on lives here.  The sync pattern
# is the exact 32-bit marker transmitted at the head of every telemetry
# frame.  DO NOT re-derive or "clean up" this sequence - downstream tooling
# re-synchronises out.bin against these exact 32 values.

# -----------------------------------------------------------------------------
# RAW CAPTURE LAYOUT
# -----------------------------------------------------------------------------
# One byte per sample.  Only the two lowest bits are meaningful:
#   bit 0 → channel 0
#   bit 1 → channel 1
# Both channels high at once = clock marker.

CH0_SHIFT = 0
CH1_SHIFT = 1

MARKER_BYTE = 0x03   # ch0=1, ch1=1 - clock marker
ONE_BYTE    = 0x02   # ch0=0, ch1=1 - mid-interval state of a '1'
ZERO_BYTE   = 0x01   # ch0=1, ch1=0 - mid-interval state of a '0'
IDLE_BYTE   = 0x00   # both low - ambiguous, never decodes


# -----------------------------------------------------------------------------
# FRAME SYNCHRONISATION
# -----------------------------------------------------------------------------

SYNC_PATTERN = (
    0, 0, 0, 1,  1, 0, 1, 0,  1, 1, 0, 0,  1, 1, 1, 1,
    1, 1, 1, 1,  1, 1, 0, 0,  0, 0, 0, 1,  1, 1, 0, 1,
)
SYNC_BITS = len(SYNC_PATTERN)            # = 32

# Partial-match correlation uses only the head of the pattern.
PARTIAL_WINDOW    = 24                   # bits scored per window
PARTIAL_THRESHOLD = 20                   # >= 20 of 24 agreeing bits = partial

# Correlation is evaluated this many windows at a time (bounds the
# temporary window x pattern comparison matrix).
CORRELATION_BLOCK = 1 << 18


# -----------------------------------------------------------------------------
# DIAGNOSTICS / OUTPUT
# -----------------------------------------------------------------------------

DEBUG_BIT_COUNT   = 1000                 # bits dumped when sync fails
DEBUG_HEAD_BITS   = 32                   # bits echoed in the status line
PROGRESS_INTERVAL = 100_000              # samples between progress events

CHANNELS_FILE        = "channels.csv"
DECODED_BITS_FILE    = "decoded_bits.csv"
FRAMES_FILE          = "out.bin"
DEBUG_BITS_FILE      = "debug_first_1000_bits.txt"
PARTIAL_MATCHES_FILE = "partial_matches.txt"
GAPS_FILE            = "gaps.csv"

RESULT_DIR_FORMAT = "{stem}_result_{stamp}"
RESULT_STAMP      = "%Y%m%d_%H%M%S"
CAPTURE_GLOB      = "*.bin"
