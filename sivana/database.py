"""SQLite storage of songs and fingerprints, and matching against it."""

from __future__ import annotations

import logging
import os
import sqlite3
from collections import Counter, defaultdict
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from sivana.hashing import Fingerprint, create_hashes
from sivana.peaks import find_peaks
from sivana.spectrogram import create_spectrogram

logger = logging.getLogger(__name__)

DB_FILE_NAME = "sivana_fingerprints.sqlite"
MIN_MATCH_SCORE = 100

_SCHEMA = """
CREATE TABLE IF NOT EXISTS songs (
    song_id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    file_path TEXT UNIQUE,
    enrolled_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS fingerprints (
    hash INTEGER NOT NULL,
    song_id INTEGER NOT NULL,
    anchor_time_idx INTEGER NOT NULL,
    FOREIGN KEY (song_id) REFERENCES songs(song_id) ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS idx_fingerprints_hash ON fingerprints (hash);
CREATE INDEX IF NOT EXISTS idx_fingerprints_song_id ON fingerprints (song_id);
"""


class DatabaseError(Exception):
    """Raised when the fingerprint database cannot do what was asked."""


@dataclass(frozen=True)
class Song:
    """An enrolled song."""

    id: int
    name: str
    file_path: str | None


@dataclass(frozen=True)
class MatchResult:
    """The best-scoring song for a query and its frame offset."""

    song_id: int
    score: int
    time_offset_in_song_frames: int


def open_db_connection(path: str | os.PathLike[str] = DB_FILE_NAME) -> sqlite3.Connection:
    """Open (creating if needed) the database with WAL and foreign keys enabled."""
    try:
        conn = sqlite3.connect(os.fspath(path))
        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute("PRAGMA foreign_keys = ON")
    except sqlite3.Error as exc:
        raise DatabaseError(f"Failed to open/create database: {exc}") from exc
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Create the tables and indexes if they do not exist yet."""
    try:
        conn.executescript(_SCHEMA)
    except sqlite3.Error as exc:
        raise DatabaseError(f"Failed to initialize database tables: {exc}") from exc
    logger.info("Database initialized successfully.")


def _upsert_song(conn: sqlite3.Connection, song_name: str, song_file_path: str | None) -> int:
    try:
        with conn:
            cursor = conn.execute(
                "INSERT INTO songs (name, file_path) VALUES (?, ?) "
                "ON CONFLICT(file_path) DO UPDATE SET name = excluded.name, "
                "enrolled_at = CURRENT_TIMESTAMP",
                (song_name, song_file_path),
            )
            if song_file_path is None:
                song_id = cursor.lastrowid
            else:
                row = conn.execute(
                    "SELECT song_id FROM songs WHERE file_path = ?", (song_file_path,)
                ).fetchone()
                song_id = row[0] if row else None
    except sqlite3.Error as exc:
        raise DatabaseError(f"Failed to insert song '{song_name}': {exc}") from exc
    if not song_id:
        raise DatabaseError(f"Failed to obtain a valid database song ID for '{song_name}'.")
    return int(song_id)


def enroll_song(
    conn: sqlite3.Connection,
    song_name: str,
    song_file_path: str | None,
    song_audio_samples: Sequence[float] | np.ndarray,
    sample_rate: int,
    window_size: int,
    hop_size: int,
    peak_params: tuple[int, int, float],
    hash_params: tuple[int, int, int, int],
) -> int:
    """Store a song and its fingerprints, replacing any earlier ones for it.

    A song with an already known ``song_file_path`` keeps its id and gets the
    new name. Returns the song id.
    """
    logger.info("Attempting to enroll song: Name='%s'", song_name)
    song_id = _upsert_song(conn, song_name, song_file_path)
    logger.info("Enrolling with DB Song ID: %d, Name='%s'", song_id, song_name)

    spectrogram = create_spectrogram(song_audio_samples, sample_rate, window_size, hop_size)
    if len(spectrogram) == 0:
        raise DatabaseError(f"Failed to generate spectrogram for song ID {song_id}")

    peaks = find_peaks(spectrogram, *peak_params)
    if not peaks:
        raise DatabaseError(f"No peaks found for song ID {song_id}")
    logger.info("Found %d peaks for song ID %d", len(peaks), song_id)

    fingerprints = create_hashes(peaks, *hash_params)
    if not fingerprints:
        raise DatabaseError(f"No fingerprints generated for song ID {song_id}")
    logger.info("Generated %d fingerprints for song ID %d", len(fingerprints), song_id)

    try:
        with conn:
            conn.execute("DELETE FROM fingerprints WHERE song_id = ?", (song_id,))
            conn.executemany(
                "INSERT INTO fingerprints (hash, song_id, anchor_time_idx) VALUES (?, ?, ?)",
                ((fp.hash, song_id, fp.anchor_time_idx) for fp in fingerprints),
            )
    except sqlite3.Error as exc:
        raise DatabaseError(f"Failed to store fingerprints for song ID {song_id}: {exc}") from exc

    logger.info("Successfully enrolled song: DB ID=%d, Name='%s'", song_id, song_name)
    return song_id


def _log_histograms(histograms: dict[int, Counter[int]]) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    for song_id, histogram in histograms.items():
        top = sorted(histogram.items(), key=lambda item: (-item[1], item[0]))
        logger.debug("Song ID %d: top offsets %s", song_id, top[:5])
        if len(top) > 5:
            logger.debug("  ... and %d more.", len(top) - 5)


def query_db_and_match(
    conn: sqlite3.Connection, query_fingerprints: Sequence[Fingerprint]
) -> MatchResult | None:
    """Find the song whose fingerprints line up best with the query.

    Votes are counted per song and per anchor-time difference. The song
    with the highest single count wins; below ``MIN_MATCH_SCORE`` votes
    there is no match and ``None`` is returned.
    """
    if not query_fingerprints:
        logger.debug("query_db - Query has no fingerprints.")
        return None

    histograms: dict[int, Counter[int]] = defaultdict(Counter)
    for fp in query_fingerprints:
        try:
            rows = conn.execute(
                "SELECT song_id, anchor_time_idx FROM fingerprints WHERE hash = ?",
                (fp.hash,),
            ).fetchall()
        except sqlite3.Error as exc:
            logger.error("Error executing fingerprint query for hash %d: %s", fp.hash, exc)
            continue
        for song_id, anchor_time_idx in rows:
            histograms[song_id][anchor_time_idx - fp.anchor_time_idx] += 1

    if not histograms:
        logger.debug("query_db - No matching hashes found in DB for any query fingerprint.")
        return None
    _log_histograms(histograms)

    best: MatchResult | None = None
    for song_id in sorted(histograms):
        delta, score = max(histograms[song_id].items(), key=lambda item: (item[1], -item[0]))
        logger.debug("query_db - Song ID %d: best offset %d has score %d.", song_id, delta, score)
        if best is None or score > best.score:
            best = MatchResult(song_id=song_id, score=score, time_offset_in_song_frames=delta)

    if best is not None and best.score < MIN_MATCH_SCORE:
        logger.debug(
            "query_db - Best score %d for Song ID %d is below threshold %d.",
            best.score,
            best.song_id,
            MIN_MATCH_SCORE,
        )
        return None
    logger.debug("query_db - Best overall match: %s", best)
    return best


def get_song_info(conn: sqlite3.Connection, song_id: int) -> Song | None:
    """Return the song with ``song_id``, or ``None`` when there is none."""
    try:
        row = conn.execute(
            "SELECT song_id, name, file_path FROM songs WHERE song_id = ?", (song_id,)
        ).fetchone()
    except sqlite3.Error as exc:
        raise DatabaseError(f"Failed to fetch song {song_id}: {exc}") from exc
    return Song(*row) if row else None


def list_songs(conn: sqlite3.Connection) -> list[Song]:
    """Return every enrolled song, ordered by name."""
    try:
        rows = conn.execute(
            "SELECT song_id, name, file_path FROM songs ORDER BY name ASC"
        ).fetchall()
    except sqlite3.Error as exc:
        raise DatabaseError(f"Failed to query songs: {exc}") from exc
    return [Song(*row) for row in rows]