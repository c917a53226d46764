# =============================================================================
# TRE/SMM/__init__.py - Signal Mapping Module
# =============================================================================
#
# The SMM is the single source of truth for the capture layout, the 32-bit
# frame sync pattern, correlation thresholds and output artifact names.
#
# All other TRE sub-modules import exclusively from here.
# Never define sync or threshold constants outside this module.
#
# Sub-modules:
#   constants.py  - capture bit layout, sync pattern, diagnostics limits
# =============================================================================
