# =============================================================================
# TRE/SDM/__init__.py - Signal Demodulation Module
# =============================================================================
#
# The SDM turns a raw two-channel capture into a clean telemetry bit stream.
#
# Sub-modules:
#   channel_extractor.py   - splits each capture byte into (ch0, ch1)
#   self_clock_decoder.py  - marker-interval demodulator, optional gap tracking
# =============================================================================
