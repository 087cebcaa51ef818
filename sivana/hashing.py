"""Landmark hashing of spectral peak pairs."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from itertools import islice

from sivana.peaks import Peak

logger = logging.getLogger(__name__)

TARGET_ZONE_DT_MIN_FRAMES = 1
TARGET_ZONE_DT_MAX_FRAMES = 50
TARGET_ZONE_DF_ABS_MAX_BINS = 200
MAX_PAIRS_PER_ANCHOR = 5
HASH_FREQ_BITS = 10
HASH_DELTA_TIME_BITS = 8

_FREQ_MASK = (1 << HASH_FREQ_BITS) - 1
_DELTA_TIME_MASK = (1 << HASH_DELTA_TIME_BITS) - 1


@dataclass(frozen=True)
class Fingerprint:
    """A hash of a peak pair and the frame of its anchor peak."""

    hash: int
    anchor_time_idx: int


def _pack_hash(anchor_freq: int, target_freq: int, delta_time: int) -> int:
    return (
        ((anchor_freq & _FREQ_MASK) << (HASH_FREQ_BITS + HASH_DELTA_TIME_BITS))
        | ((target_freq & _FREQ_MASK) << HASH_DELTA_TIME_BITS)
        | (delta_time & _DELTA_TIME_MASK)
    )


def create_hashes(
    peaks: Sequence[Peak],
    dt_min_frames: int,
    dt_max_frames: int,
    df_abs_max_bins: int,
    max_pairs_per_anchor: int,
) -> list[Fingerprint]:
    """Pair each peak with later peaks in its target zone and hash the pairs.

    For every anchor, at most ``max_pairs_per_anchor`` following peaks whose
    time distance lies in ``[dt_min_frames, dt_max_frames]`` and whose
    frequency distance is at most ``df_abs_max_bins`` are used.
    """
    if len(peaks) < 2:
        logger.debug("create_hashes - Not enough peaks to form pairs (need at least 2).")
        return []

    logger.debug(
        "create_hashes - Processing %d peaks. Target zone: dt=[%d-%d], df_abs_max=%d, max_pairs=%d",
        len(peaks),
        dt_min_frames,
        dt_max_frames,
        df_abs_max_bins,
        max_pairs_per_anchor,
    )

    fingerprints: list[Fingerprint] = []
    for position, anchor in enumerate(peaks):
        targets = (
            (target, max(0, target.time_idx - anchor.time_idx))
            for target in islice(peaks, position + 1, None)
        )
        in_zone = (
            (target, delta)
            for target, delta in targets
            if dt_min_frames <= delta <= dt_max_frames
            and abs(target.freq_bin_idx - anchor.freq_bin_idx) <= df_abs_max_bins
        )
        for target, delta in islice(in_zone, max(0, max_pairs_per_anchor)):
            fingerprints.append(
                Fingerprint(
                    hash=_pack_hash(anchor.freq_bin_idx, target.freq_bin_idx, delta),
                    anchor_time_idx=anchor.time_idx,
                )
            )

    logger.debug("create_hashes - Generated %d fingerprints.", len(fingerprints))
    return fingerprints