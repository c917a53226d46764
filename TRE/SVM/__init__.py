# =============================================================================
# TRE/SVM/__init__.py - Signal Verification Module
# =============================================================================
#
# The SVM holds the runnable front ends for checking captures and the
# pipeline itself.
#
# Sub-modules:
#   capture_sim.py  - CLI: process a capture, print status, write results
#   validate.py     - automated self-validation suite for SDM/SFM/SGM/SPM
# =============================================================================
