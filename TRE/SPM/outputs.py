# =============================================================================
# outputs.py - Result Artifact Writers
# =============================================================================
#
# Every file the pipeline leaves in the result directory is written here.
# The recovery core never touches the filesystem.
#
#   channels.csv                 ch0,ch1,ch0&ch1 per sample
#   decoded_bits.csv             one decoded bit per line
#   out.bin                      packed frames back to back, no delimiter
#   debug_first_1000_bits.txt    only when sync failed on a non-empty stream
#   partial_matches.txt          idem, only when partial matches exist
#   gaps.csv                     gap-tracking mode only
#
# =============================================================================

from __future__ import annotations
import os
from datetime import datetime

import numpy as np

from TRE.SMM.constants import (
    CHANNELS_FILE, DECODED_BITS_FILE, FRAMES_FILE,
    DEBUG_BITS_FILE, PARTIAL_MATCHES_FILE, GAPS_FILE,
    RESULT_DIR_FORMAT, RESULT_STAMP, PROGRESS_INTERVAL,
)
from TRE.SDM.channel_extractor import ChannelSamples, ProgressFn
from TRE.SDM.self_clock_decoder import DecodeGap
from TRE.SFM.frame_sync import Frame, SyncDiagnostics, frames_to_stream

# Rows written per savetxt call; one progress event per block.
_ROW_BLOCK = PROGRESS_INTERVAL


def result_dir_for(input_path: str, when: datetime | None = None) -> str:
    """<input dir>/<stem>_result_<YYYYmmdd_HHMMSS> (not created)."""
    when  = when or datetime.now()
    stem  = os.path.splitext(os.path.basename(input_path))[0]
    name  = RESULT_DIR_FORMAT.format(stem=stem, stamp=when.strftime(RESULT_STAMP))
    return os.path.join(os.path.dirname(os.path.abspath(input_path)), name)


def write_channels_csv(
    samples: ChannelSamples,
    path: str,
    on_progress: ProgressFn | None = None,
) -> None:
    table = np.column_stack((samples.ch0, samples.ch1, samples.marker_plane()))
    total = int(table.shape[0])
    with open(path, "w", newline="") as fh:
        for lo in range(0, total, _ROW_BLOCK):
            if on_progress:
                on_progress("write_channels", lo, total)
            np.savetxt(fh, table[lo:lo + _ROW_BLOCK], fmt="%d", delimiter=",")
    if on_progress:
        on_progress("write_channels", total, total)


def write_decoded_bits_csv(bits: np.ndarray, path: str) -> None:
    with open(path, "w", newline="") as fh:
        if bits.shape[0]:
            np.savetxt(fh, bits.reshape(-1, 1), fmt="%d")


def write_frames_bin(frames: list[Frame], path: str) -> int:
    """Write out.bin (created even when empty).  Returns bytes written."""
    payload = frames_to_stream(frames)
    with open(path, "wb") as fh:
        fh.write(payload)
    return len(payload)


def write_gaps_csv(gaps: list[DecodeGap], path: str) -> None:
    with open(path, "w", newline="") as fh:
        fh.write("bit_index,marker_start,marker_end,mid_sample,mid_ch0,mid_ch1\n")
        for g in gaps:
            fh.write(
                f"{g.bit_index},{g.marker_start},{g.marker_end},"
                f"{g.mid_sample},{g.mid_state[0]},{g.mid_state[1]}\n"
            )


def write_sync_diagnostics(diag: SyncDiagnostics, output_dir: str) -> list[str]:
    """
    Dump sync-failure material.  Returns the paths written.
    Raises OSError; the caller decides whether that is fatal.
    """
    written = []
    bits_path = os.path.join(output_dir, DEBUG_BITS_FILE)
    with open(bits_path, "w") as fh:
        fh.write(diag.first_bits)
    written.append(bits_path)

    if diag.partial_lines:
        partial_path = os.path.join(output_dir, PARTIAL_MATCHES_FILE)
        with open(partial_path, "w") as fh:
            fh.write("\n".join(diag.partial_lines) + "\n")
        written.append(partial_path)
    return written


def artifact_paths(output_dir: str) -> dict[str, str]:
    return {
        "channels":     os.path.join(output_dir, CHANNELS_FILE),
        "decoded_bits": os.path.join(output_dir, DECODED_BITS_FILE),
        "frames":       os.path.join(output_dir, FRAMES_FILE),
        "gaps":         os.path.join(output_dir, GAPS_FILE),
    }
