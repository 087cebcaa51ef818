"""Audio fingerprinting of WAV files with spectrogram peak landmarks and a SQLite store."""

__version__ = "0.1.0"