"""Command-line interface: enroll songs, query snippets and list the catalogue."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from contextlib import closing
from pathlib import Path

from sivana.audio_loader import AudioLoadError, load_audio_file
from sivana.database import (
    DB_FILE_NAME,
    DatabaseError,
    enroll_song,
    get_song_info,
    init_db,
    list_songs,
    open_db_connection,
    query_db_and_match,
)
from sivana.hashing import (
    MAX_PAIRS_PER_ANCHOR,
    TARGET_ZONE_DF_ABS_MAX_BINS,
    TARGET_ZONE_DT_MAX_FRAMES,
    TARGET_ZONE_DT_MIN_FRAMES,
    create_hashes,
)
from sivana.peaks import find_peaks
from sivana.spectrogram import create_spectrogram

SAMPLE_RATE = 22050
FFT_WINDOW_SIZE = 2048
FFT_HOPSIZE = 1024

PEAK_PARAMS = (2, 5, 2.0)
HASH_PARAMS = (
    TARGET_ZONE_DT_MIN_FRAMES,
    TARGET_ZONE_DT_MAX_FRAMES,
    TARGET_ZONE_DF_ABS_MAX_BINS,
    MAX_PAIRS_PER_ANCHOR,
)


class CommandError(Exception):
    """Raised when a command cannot complete."""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sivana", description="Sivana Audio Fingerprinter")
    parser.add_argument(
        "--db",
        type=Path,
        default=Path(DB_FILE_NAME),
        help=f"path of the fingerprint database (default: {DB_FILE_NAME})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="show debug output")
    commands = parser.add_subparsers(dest="command", required=True)

    enroll = commands.add_parser("enroll", help="Enroll a new song into the fingerprint database")
    enroll.add_argument("file_path", type=Path, metavar="FILE_PATH", help="audio file to enroll")
    enroll.add_argument(
        "-t",
        "--title",
        help="display name for the song; the file name is used if not given",
    )

    query = commands.add_parser(
        "query", help="Query the database with an audio snippet to identify a song"
    )
    query.add_argument(
        "snippet_path", type=Path, metavar="SNIPPET_PATH", help="audio snippet file"
    )

    commands.add_parser("list", help="List all songs currently enrolled in the database")
    return parser


def _enroll(conn, file_path: Path, title: str | None) -> None:
    print(f"Enroll command received for: {file_path}")
    if not file_path.exists():
        raise CommandError(f"Enroll error: File not found at '{file_path}'")

    song_name = title if title is not None else file_path.stem
    file_path_str = str(file_path)

    try:
        samples = load_audio_file(file_path, SAMPLE_RATE)
    except AudioLoadError as exc:
        raise CommandError(f"Error loading audio file '{file_path}': {exc}") from exc
    if len(samples) == 0:
        raise CommandError(
            f"No audio samples loaded from '{file_path}'. "
            "File might be empty, unsupported, or corrupted."
        )
    print(f"Loaded {len(samples)} samples for '{song_name}'.")

    try:
        song_id = enroll_song(
            conn,
            song_name,
            file_path_str,
            samples,
            SAMPLE_RATE,
            FFT_WINDOW_SIZE,
            FFT_HOPSIZE,
            PEAK_PARAMS,
            HASH_PARAMS,
        )
    except DatabaseError as exc:
        raise CommandError(
            f"Error during enrollment process for '{song_name}': {exc}"
        ) from exc

    print(f"Successfully enrolled '{song_name}' with DB Song ID: {song_id}.")
    print(f"File path stored: {file_path_str}")


def _query(conn, snippet_path: Path) -> None:
    print(f"Query command received for snippet: {snippet_path}")
    if not snippet_path.exists():
        raise CommandError(f"Query error: Snippet file not found at '{snippet_path}'")

    try:
        samples = load_audio_file(snippet_path, SAMPLE_RATE)
    except AudioLoadError as exc:
        raise CommandError(f"Error loading audio snippet '{snippet_path}': {exc}") from exc
    if len(samples) == 0:
        raise CommandError(f"No audio samples loaded from snippet '{snippet_path}'.")
    print(f"Loaded {len(samples)} samples for query snippet.")

    spectrogram = create_spectrogram(samples, SAMPLE_RATE, FFT_WINDOW_SIZE, FFT_HOPSIZE)
    if len(spectrogram) == 0:
        print("Warning: Query spectrogram is empty. This might lead to no match.")
    peaks = find_peaks(spectrogram, *PEAK_PARAMS)
    if not peaks:
        print("Warning: No peaks found in query snippet. This might lead to no match.")
    fingerprints = create_hashes(peaks, *HASH_PARAMS)
    if not fingerprints:
        print("Warning: No fingerprints generated for query snippet. This might lead to no match.")
    print(f"Generated {len(fingerprints)} fingerprints for query snippet.")

    if not fingerprints:
        print("\n======= NO FINGERPRINTS GENERATED FOR QUERY, CANNOT MATCH =======")
        return

    match = query_db_and_match(conn, fingerprints)
    if match is None:
        print("\n======= NO MATCH FOUND =======")
        return

    print("\n======= MATCH FOUND! =======")
    try:
        song = get_song_info(conn, match.song_id)
    except DatabaseError as exc:
        print(f"Matched Song ID: {match.song_id} (error fetching full info: {exc})")
    else:
        if song is None:
            print(
                f"Matched Song ID: {match.song_id} "
                "(but metadata not found in 'songs' table!)"
            )
        else:
            print(f"Matched Song ID: {song.id}")
            print(f"Matched Song Name: {song.name}")
            if song.file_path is not None:
                print(f"Original File Path: {song.file_path}")

    print(f"Match Score: {match.score}")
    print(f"Calculated Time Offset in Song (frames): {match.time_offset_in_song_frames}")
    offset_seconds = match.time_offset_in_song_frames * FFT_HOPSIZE / SAMPLE_RATE
    print(f"(Approx. offset in matched song: {offset_seconds:.2f} seconds)")


def _list(conn) -> None:
    print("\n--- Enrolled Songs in Database ---")
    try:
        songs = list_songs(conn)
    except DatabaseError as exc:
        raise CommandError(str(exc)) from exc
    for song in songs:
        path = song.file_path if song.file_path is not None else "N/A"
        print(f"ID: {song.id:<4} | Name: {song.name:<40} | Path: {path}")
    if songs:
        print(f"--- Listed {len(songs)} songs. ---")
    else:
        print("No songs found in the database.")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; returns the process exit status."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    try:
        with closing(open_db_connection(args.db)) as conn:
            init_db(conn)
            if args.command == "enroll":
                _enroll(conn, args.file_path, args.title)
            elif args.command == "query":
                _query(conn, args.snippet_path)
            else:
                _list(conn)
    except (CommandError, DatabaseError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())