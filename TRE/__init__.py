# =============================================================================
# Telemetry Recovery Engine (TRE)
# =============================================================================
#
# Recovers sync-delimited telemetry frames from a raw two-channel digital
# capture (one byte per sample, ch0 = bit 0, ch1 = bit 1).
#
# RESPONSIBLE for:
#   - Channel extraction          byte → (ch0, ch1)
#   - Self-clocking demodulation  both-high samples are clock markers; the
#                                 sample halfway between two markers carries
#                                 the bit (0,1) → 1, (1,0) → 0
#   - Frame synchronisation       exact 32-bit sync search, frames run to the
#                                 next sync or end of stream
#   - Partial correlation         24-bit head scoring (>= 20/24) for
#                                 diagnosing a failed lock
#   - Bit packing                 MSB-first, zero-padded bytes per frame
#
# NOT responsible for:
#   - Interpreting frame content (field layout inside a frame)
#   - Variable-length or multi-pattern sync schemes
#   - Live / streaming sources: a complete capture is processed in memory
#
# ── DATA FLOW ─────────────────────────────────────────────────────────────────
#   capture bytes
#     → SDM.channel_extractor   ChannelSamples
#     → SDM.self_clock_decoder  DemodResult  (bits, marker_count, gaps)
#     → SFM.frame_sync          SyncResult   (frames, partial_matches)
#     → SFM.bit_packer          packed frame bytes → out.bin
#
# ── Module layout ─────────────────────────────────────────────────────────────
#   SMM/  constants: capture layout, sync pattern, thresholds, file names
#   SDM/  channel extraction + demodulation
#   SFM/  frame sync + bit packing
#   SGM/  synthetic capture generation (inverse pipeline)
#   SPM/  pipeline orchestration + artifact writers
#   SVM/  CLI front end + self-validation suite
# =============================================================================
