"""Short-time Fourier transform magnitudes for mono audio."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

logger = logging.getLogger(__name__)


def hann_window(window_size: int) -> np.ndarray:
    """Return a symmetric Hann window of ``window_size`` points."""
    if window_size < 0:
        raise ValueError("window_size must not be negative")
    if window_size == 0:
        return np.empty(0, dtype=np.float64)
    if window_size == 1:
        return np.ones(1, dtype=np.float64)
    positions = np.arange(window_size, dtype=np.float64)
    return 0.5 * (1.0 - np.cos(2.0 * np.pi * positions / (window_size - 1)))


def create_spectrogram(
    samples: Sequence[float] | np.ndarray,
    sample_rate: int,
    window_size: int,
    hop_size: int,
) -> np.ndarray:
    """Compute a magnitude spectrogram.

    Returns an array of shape ``(frames, window_size // 2 + 1)``. When there
    are fewer samples than one window, the array has no frames.
    ``sample_rate`` is accepted for symmetry with the rest of the pipeline
    and does not affect the result.
    """
    if window_size < 1:
        raise ValueError("window_size must be positive")
    if hop_size < 1:
        raise ValueError("hop_size must be positive")

    data = np.asarray(samples, dtype=np.float64)
    if data.ndim != 1:
        raise ValueError("samples must be one-dimensional")

    num_bins = window_size // 2 + 1
    if data.size < window_size:
        logger.debug("Not enough samples for a full FFT window.")
        return np.empty((0, num_bins), dtype=np.float32)

    frames = sliding_window_view(data, window_size)[::hop_size]
    logger.debug(
        "create_spectrogram - Samples: %d, Window: %d, Hop: %d, Frames: %d",
        data.size,
        window_size,
        hop_size,
        len(frames),
    )

    spectrum = np.fft.rfft(frames * hann_window(window_size), axis=1)
    return np.abs(spectrum).astype(np.float32)