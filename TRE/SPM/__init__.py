# =============================================================================
# TRE/SPM/__init__.py - Signal Processing Module
# =============================================================================
#
# Glues the SDM and SFM stages into one run over a capture and writes the
# result artifacts.  Presentation (console, HTTP) lives outside this module.
#
# Sub-modules:
#   processor.py  - process_capture() (pure) and process_file() (I/O boundary)
#   outputs.py    - CSV / binary / debug artifact writers
# =============================================================================
