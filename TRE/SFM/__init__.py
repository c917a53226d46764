# =============================================================================
# TRE/SFM/__init__.py - Sync & Framing Module
# =============================================================================
#
# Sub-modules:
#   frame_sync.py  - exact 32-bit sync search, frame delimiting, partial
#                    correlation diagnostics
#   bit_packer.py  - MSB-first packing of a bit region into bytes
# =============================================================================
