"""Loading audio files as mono samples at a chosen sample rate."""

from __future__ import annotations

import logging
import os
from fractions import Fraction

import numpy as np
from scipy.io import wavfile
from scipy.signal import resample_poly

logger = logging.getLogger(__name__)


class AudioLoadError(Exception):
    """Raised when an audio file cannot be read, decoded or resampled."""


def _to_float(data: np.ndarray) -> np.ndarray:
    """Scale integer PCM into [-1.0, 1.0); pass floating point through."""
    if np.issubdtype(data.dtype, np.floating):
        return data.astype(np.float32)
    if data.dtype == np.uint8:
        return ((data.astype(np.float64) - 128.0) / 128.0).astype(np.float32)
    if np.issubdtype(data.dtype, np.signedinteger):
        scale = float(2 ** (data.dtype.itemsize * 8 - 1))
        return (data.astype(np.float64) / scale).astype(np.float32)
    raise AudioLoadError(f"Unsupported sample format: {data.dtype}")


def _to_mono(data: np.ndarray) -> np.ndarray:
    """Average stereo, keep mono, and take the first channel of anything wider."""
    if data.ndim == 1:
        return data
    channels = data.shape[1]
    if channels == 1:
        return data[:, 0]
    if channels == 2:
        return ((data[:, 0] + data[:, 1]) / 2.0).astype(np.float32)
    logger.warning("Audio has %d channels. Taking first channel only.", channels)
    return data[:, 0]


def load_audio_file(file_path: str | os.PathLike[str], target_sample_rate: int) -> np.ndarray:
    """Decode a WAV file, mix it down to mono and resample it.

    Returns the samples as a one-dimensional ``float32`` array.
    Raises :class:`AudioLoadError` on any failure.
    """
    if target_sample_rate <= 0:
        raise AudioLoadError(
            f"Failed to create resampler: invalid target sample rate {target_sample_rate}"
        )

    try:
        handle = open(file_path, "rb")
    except OSError as exc:
        raise AudioLoadError(f"Failed to open file: {exc}") from exc

    with handle:
        try:
            original_rate, data = wavfile.read(handle)
        except (ValueError, EOFError, OSError, TypeError) as exc:
            raise AudioLoadError(
                f"Unsupported format or error probing file: {exc}"
            ) from exc

    samples = _to_mono(_to_float(np.asarray(data)))
    if samples.size == 0:
        raise AudioLoadError("No audio samples were decoded from the file.")
    if original_rate <= 0:
        raise AudioLoadError(
            "Could not determine the original sample rate from the audio file."
        )

    if original_rate == target_sample_rate:
        logger.info(
            "No resampling needed. Audio already at target sample rate: %d Hz.",
            target_sample_rate,
        )
        return np.ascontiguousarray(samples, dtype=np.float32)

    logger.info("Resampling audio from %d Hz to %d Hz...", original_rate, target_sample_rate)
    ratio = Fraction(target_sample_rate, original_rate)
    try:
        resampled = resample_poly(
            samples.astype(np.float64), up=ratio.numerator, down=ratio.denominator
        )
    except ValueError as exc:
        raise AudioLoadError(f"Error during resampling: {exc}") from exc

    if resampled.size == 0:
        raise AudioLoadError("Resampling produced no output, though it should have.")
    logger.info(
        "Resampling complete. Original samples: %d, Resampled samples: %d",
        samples.size,
        resampled.size,
    )
    return resampled.astype(np.float32)