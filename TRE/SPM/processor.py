#!/usr/bin/env python3
# =============================================================================
# processor.py - Capture Recovery Pipeline
# =============================================================================
#
# Runs the full recovery chain on one capture:
#
#   bytes → ChannelSamples → DemodResult → SyncResult (+ diagnostics)
#
# process_capture() is pure: it takes the capture bytes and returns the
# in-memory result.  process_file() is the boundary layer: it reads the
# capture, calls process_capture() and writes the result artifacts.
#
# Nothing here prints.  Progress and status go through two callbacks:
#
#   on_progress(stage, current, total)
#   on_status(level, message)        level ∈ STATUS_LEVELS
#
# The CLI (SVM/capture_sim.py) and the HTTP bridge (tools/) decide how to
# present them.
#
# Error policy:
#   - unreadable / missing input      → reported once, returns None
#   - debug-artifact write failure    → reported, run still succeeds
#   - zero frames                     → valid result, diagnostics attached
#
# =============================================================================

from __future__ import annotations
import os
from typing import Callable, NamedTuple

from TRE.SDM.channel_extractor import ChannelSamples, ProgressFn, extract_channels
from TRE.SDM.self_clock_decoder import DemodResult, SelfClockDecoder
from TRE.SFM.frame_sync import (
    SyncResult, SyncDiagnostics, sync_frames, sync_diagnostics,
)
from TRE.SMM.constants import SYNC_PATTERN
from TRE.SPM import outputs

StatusFn = Callable[[str, str], None]

STATUS_LEVELS = ("step", "stat", "info", "error", "success")


class CaptureResult(NamedTuple):
    samples:     ChannelSamples
    demod:       DemodResult
    sync:        SyncResult
    diagnostics: SyncDiagnostics | None


def _pct(part: int, whole: int) -> str:
    return f"{(part / whole) * 100:.1f}%" if whole else "n/a"


def process_capture(
    raw: bytes,
    sync_pattern=SYNC_PATTERN,
    track_gaps: bool = False,
    on_progress: ProgressFn | None = None,
    on_status: StatusFn | None = None,
) -> CaptureResult:
    """
    Recover frames from an in-memory capture.

    Returns
    -------
    CaptureResult
    """
    def status(level: str, message: str) -> None:
        if on_status:
            on_status(level, message)

    status("step", "Extracting channels")
    samples = extract_channels(raw, on_progress=on_progress)
    n = samples.sample_count
    status("stat", f"Extracted {n:,} samples")
    status(
        "stat",
        f"Channel 0: {samples.ch0_count:,} ({_pct(samples.ch0_count, n)}), "
        f"Channel 1: {samples.ch1_count:,} ({_pct(samples.ch1_count, n)})",
    )

    status("step", "Decoding signal")
    demod = SelfClockDecoder(track_gaps=track_gaps).decode(samples)
    status(
        "stat",
        f"Decoded {demod.bits.shape[0]:,} bits, found {demod.marker_count:,} clock markers",
    )
    if demod.invalid_count:
        status("info", f"Ambiguous intervals dropped: {demod.invalid_count:,}")

    status("step", "Searching for telemetry frames")
    sync = sync_frames(
        demod.bits,
        sync_pattern=sync_pattern,
        gaps=demod.gaps if track_gaps else None,
    )
    if sync.partial_matches:
        status("info", f"Partial matches: {len(sync.partial_matches):,}")

    if sync.frames:
        status("stat", f"Found {sync.frame_count:,} frames. {sync.summary()}")
    else:
        status("stat", sync.summary())

    diag = sync_diagnostics(demod.bits, sync)
    if diag is not None:
        status("error", f"Sync marker not found. First 32 bits: {diag.first_32}")

    return CaptureResult(samples=samples, demod=demod, sync=sync, diagnostics=diag)


def process_file(
    input_path: str,
    output_dir: str,
    sync_pattern=SYNC_PATTERN,
    track_gaps: bool = False,
    on_progress: ProgressFn | None = None,
    on_status: StatusFn | None = None,
) -> CaptureResult | None:
    """
    Run the pipeline on a capture file and write every result artifact into
    output_dir (created if missing).

    Returns the CaptureResult, or None when the capture could not be read or
    the mandatory outputs could not be written.
    """
    def status(level: str, message: str) -> None:
        if on_status:
            on_status(level, message)

    status("info", f"Processing started: {os.path.basename(input_path)}")
    try:
        with open(input_path, "rb") as fh:
            raw = fh.read()
    except OSError as exc:
        status("error", f"Cannot read capture {input_path}: {exc}")
        return None
    status("stat", f"Read {len(raw):,} bytes")

    result = process_capture(
        raw,
        sync_pattern=sync_pattern,
        track_gaps=track_gaps,
        on_progress=on_progress,
        on_status=on_status,
    )

    paths = outputs.artifact_paths(output_dir)
    try:
        os.makedirs(output_dir, exist_ok=True)

        outputs.write_channels_csv(result.samples, paths["channels"], on_progress=on_progress)
        status("stat", f"Channels saved to {os.path.basename(paths['channels'])}")

        outputs.write_decoded_bits_csv(result.demod.bits, paths["decoded_bits"])
        status("stat", f"Decoded bits saved to {os.path.basename(paths['decoded_bits'])}")

        if track_gaps:
            outputs.write_gaps_csv(result.demod.gaps, paths["gaps"])
            status("stat", f"{len(result.demod.gaps):,} gaps saved to {os.path.basename(paths['gaps'])}")

        outputs.write_frames_bin(result.sync.frames, paths["frames"])
    except OSError as exc:
        status("error", f"Cannot write results to {output_dir}: {exc}")
        return None

    if result.sync.frames:
        status("stat", f"Frames saved to {os.path.basename(paths['frames'])}")
    else:
        status("stat", f"{os.path.basename(paths['frames'])} created (empty, no frames found)")

    if result.diagnostics is not None:
        try:
            written = outputs.write_sync_diagnostics(result.diagnostics, output_dir)
        except OSError as exc:
            status("error", f"Failed to save debug information: {exc}")
        else:
            status("error", f"First {len(result.diagnostics.first_bits):,} bits saved to: {written[0]}")
            if len(written) > 1:
                status("info", f"Partial matches saved to: {written[1]}")

    status("success", "Processing completed successfully!")
    return result
