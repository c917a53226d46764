#!/usr/bin/env python3
# =============================================================================
# capture_sim.py - Telemetry Capture Processor (CLI)
# =============================================================================
#
# Console front end for the recovery pipeline.  Feed it a raw two-channel
# capture and it writes the channel table, decoded bits and packed frames into
# a fresh result directory next to the capture.
#
# Usage:
#   python -m TRE.SVM.capture_sim                      # pick a *.bin from cwd
#   python -m TRE.SVM.capture_sim <capture.bin>
#   python -m TRE.SVM.capture_sim <capture.bin> --output-dir out/
#   python -m TRE.SVM.capture_sim <capture.bin> --track-gaps
#   python -m TRE.SVM.capture_sim <capture.bin> --dump-frames
#
# Output sections:
#   [1] Capture info       - file name, size
#   [2] Status stream      - one timestamped line per pipeline event
#   [3] Frame dump         - optional, first 10 frames
#   [4] VERDICT            - frames recovered / sync lost
#
# =============================================================================

from __future__ import annotations
import sys, os, argparse, glob
from datetime import datetime

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from TRE.SMM.constants import CAPTURE_GLOB
from TRE.SPM.processor import process_file
from TRE.SPM.outputs import result_dir_for

DIVIDER = "=" * 68

TAGS = {
    "step":    "[>>]",
    "stat":    "[--]",
    "info":    "[INFO]",
    "error":   "[!!]",
    "success": "[OK]",
}

STAGE_LABELS = {
    "extract":        "Extracting",
    "write_channels": "Writing",
}


# ---------------------------------------------------------------------------
# Presentation callbacks
# ---------------------------------------------------------------------------

class ConsoleReporter:
    """Timestamped status lines plus a single redrawn progress line."""

    def __init__(self, quiet: bool = False, stream=None):
        self.quiet   = quiet
        self.stream  = stream or sys.stdout
        self._dirty  = False

    @staticmethod
    def _stamp() -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _clear_progress(self) -> None:
        if self._dirty:
            self.stream.write("\r" + " " * 72 + "\r")
            self._dirty = False

    def status(self, level: str, message: str) -> None:
        if self.quiet and level not in ("error", "success"):
            return
        self._clear_progress()
        tag = TAGS.get(level, "[--]")
        print(f"  [{self._stamp()}] {tag} {message}", file=self.stream)

    def progress(self, stage: str, current: int, total: int) -> None:
        if self.quiet:
            return
        if current >= total:
            self._clear_progress()
            return
        label = STAGE_LABELS.get(stage, stage)
        self.stream.write(
            f"\r  [{self._stamp()}] {label}: {current + 1:,}/{total:,} ..."
        )
        self.stream.flush()
        self._dirty = True


# ---------------------------------------------------------------------------
# Capture selection
# ---------------------------------------------------------------------------

def select_capture(directory: str) -> str | None:
    """List *.bin captures in `directory` and ask for one by number."""
    captures = sorted(glob.glob(os.path.join(directory, CAPTURE_GLOB)))
    if not captures:
        print(f"  [!!] No {CAPTURE_GLOB} files found in {directory}")
        return None

    print("  Available captures:")
    for i, path in enumerate(captures, start=1):
        size_kb = os.path.getsize(path) // 1024
        print(f"  {i:3d}. {os.path.basename(path)} ({size_kb:,} KB)")

    try:
        choice = int(input("  Enter capture number: "))
    except (ValueError, EOFError):
        choice = 0
    if 1 <= choice <= len(captures):
        return captures[choice - 1]

    print("  [!!] Invalid selection")
    return None


# ---------------------------------------------------------------------------
# Main run
# ---------------------------------------------------------------------------

def run_capture(
    capture_path: str,
    output_dir: str | None,
    track_gaps: bool,
    dump_frames: bool,
    quiet: bool = False,
) -> bool:
    """
    Process one capture.  Returns True when the run completed (whether or not
    any frame was found), False on input / output failure.
    """
    print(f"\n{DIVIDER}")
    print(f"  Telemetry Capture Processor")
    print(DIVIDER)

    if not os.path.exists(capture_path):
        print(f"  [!!] File not found: {capture_path}")
        return False

    output_dir = output_dir or result_dir_for(capture_path)
    print(f"  Capture  : {os.path.basename(capture_path)}")
    print(f"  Size     : {os.path.getsize(capture_path):,} bytes")
    print(f"  Results  : {output_dir}")
    print(f"  Gaps     : {'tracked' if track_gaps else 'dropped silently'}\n")

    reporter = ConsoleReporter(quiet=quiet)
    result = process_file(
        capture_path,
        output_dir,
        track_gaps=track_gaps,
        on_progress=reporter.progress,
        on_status=reporter.status,
    )
    if result is None:
        return False

    sync = result.sync

    if dump_frames and sync.frames:
        print(f"\n  -- Frame Dump (first 10) --")
        for f in sync.frames[:10]:
            gap_note = f"  gaps={f.gap_count}" if track_gaps else ""
            print(
                f"  Frame {f.frame_index:04d}  "
                f"bit[{f.bit_offset}]  "
                f"len={f.bit_length}{gap_note}"
            )
            print(f"    hex: {f.data[:24].hex(' ')}{' ...' if len(f.data) > 24 else ''}")

    print(f"\n{DIVIDER}")
    if sync.locked:
        print(f"  VERDICT: LOCKED - {sync.frame_count:,} frames recovered")
    else:
        print(f"  VERDICT: NO LOCK - {sync.summary()}")
    print(f"  Results saved to: {output_dir}")
    print(f"{DIVIDER}\n")
    return True


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Recover telemetry frames from a raw two-channel capture",
    )
    parser.add_argument(
        "capture", nargs="?",
        help="Path to the capture (.bin); omit to choose from the working directory",
    )
    parser.add_argument(
        "--output-dir", default=None,
        help="Result directory, default <capture>_result_<timestamp> beside the capture",
    )
    parser.add_argument(
        "--track-gaps", action="store_true",
        help="Record every dropped (ambiguous) decode interval in gaps.csv",
    )
    parser.add_argument(
        "--dump-frames", action="store_true",
        help="Print the first 10 recovered frames",
    )
    parser.add_argument(
        "--quiet", action="store_true",
        help="Only print errors and the final verdict",
    )
    args = parser.parse_args(argv)

    capture = args.capture or select_capture(os.getcwd())
    if capture is None:
        sys.exit(1)

    ok = run_capture(
        capture_path=capture,
        output_dir=args.output_dir,
        track_gaps=args.track_gaps,
        dump_frames=args.dump_frames,
        quiet=args.quiet,
    )
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
