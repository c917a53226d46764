# =============================================================================
# SGM - Signal Generation Module
# Subfolder of TRE (Telemetry Recovery Engine)
# =============================================================================
#
# Generates deterministic synthetic captures - the inverse of the recovery
# pipeline - so the decoder and synchroniser can be checked end to end
# without a real capture on hand.
#
# Modules:
#   capture_encoder.py - Converts bit streams to raw two-channel capture bytes
#   frame_builder.py   - Lays out sync-delimited telemetry frames as bits
#
# Constants live in TRE/SMM/constants.py
# Verification tools live in TRE/SVM/
