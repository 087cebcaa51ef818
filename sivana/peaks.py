"""Local-maximum peak picking on a magnitude spectrogram."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Peak:
    """A spectral peak at a frame index and frequency bin."""

    time_idx: int
    freq_bin_idx: int


def find_peaks(
    spectrogram: Sequence[Sequence[float]] | np.ndarray,
    neighborhood_time_radius: int,
    neighborhood_freq_radius: int,
    min_magnitude_threshold: float,
) -> list[Peak]:
    """Find points that dominate their rectangular neighbourhood.

    A point is a peak when it is not below the threshold, no neighbour is
    larger, and no neighbour earlier in row-major order is equal to it.
    Peaks are returned ordered by time, then frequency.
    """
    if neighborhood_time_radius < 0 or neighborhood_freq_radius < 0:
        raise ValueError("neighbourhood radii must not be negative")

    if len(spectrogram) == 0 or len(spectrogram[0]) == 0:
        logger.debug("find_peaks - Spectrogram is empty or first frame is empty.")
        return []

    mags = np.asarray(spectrogram, dtype=np.float64)
    if mags.ndim != 2:
        raise ValueError("spectrogram must be two-dimensional")

    num_frames, num_bins = mags.shape
    rt, rf = neighborhood_time_radius, neighborhood_freq_radius
    logger.debug(
        "find_peaks - Spectrogram: %d frames, %d freq bins; "
        "TimeRadius=%d, FreqRadius=%d, MinMag=%s",
        num_frames,
        num_bins,
        rt,
        rf,
        min_magnitude_threshold,
    )

    # NaN padding never compares greater or equal, so edges behave as if clipped.
    padded = np.full((num_frames + 2 * rt, num_bins + 2 * rf), np.nan)
    padded[rt : rt + num_frames, rf : rf + num_bins] = mags

    is_peak = ~(mags < min_magnitude_threshold)
    for dt in range(-rt, rt + 1):
        for df in range(-rf, rf + 1):
            if dt == 0 and df == 0:
                continue
            neighbour = padded[rt + dt : rt + dt + num_frames, rf + df : rf + df + num_bins]
            is_peak &= ~(neighbour > mags)
            if (dt, df) < (0, 0):
                is_peak &= ~(neighbour == mags)

    peaks = [Peak(int(t), int(f)) for t, f in np.argwhere(is_peak)]
    logger.debug("find_peaks - Found %d peaks.", len(peaks))
    return peaks