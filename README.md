# sivana

An audio fingerprinter. Songs are enrolled into a local SQLite database as
landmark hashes built from spectrogram peaks. A short audio snippet can then be
matched against the database to identify the song it comes from and roughly
where in the song it starts.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Command line

By default the database is the file `sivana_fingerprints.sqlite` in the current
directory. It is created on first use. Use `--db PATH` to pick another file,
and `-v`/`--verbose` to show debug output. Both options go before the command.

Enroll a song. If no title is given, the file name without its extension is
used. Enrolling the same path again keeps the song's ID, takes the new title and
replaces its fingerprints.

```
sivana enroll path/to/song.wav --title "My Song"
```

Identify a snippet:

```
sivana query path/to/snippet.wav
```

On a match, the output shows:

- the matched song's ID, name and file path;
- the match score;
- the estimated offset into the song, in frames and in seconds.

A match needs a score of at least 100 to count.

List enrolled songs, sorted by name:

```
sivana list
```

When a command fails, it prints `Error: ...` to standard error and exits with
status 1. The same command line can also be run as `python -m sivana.cli`.

## How it works

1. `sivana.audio_loader.load_audio_file` reads the file and produces mono
   `float32` samples at the target rate:
   - integer PCM is scaled to floats;
   - stereo is averaged to mono;
   - wider audio keeps only the first channel;
   - the result is resampled to the target rate (22050 Hz on the command line)
     with polyphase filtering.

   Any failure raises `AudioLoadError`.
2. `sivana.spectrogram.create_spectrogram` computes magnitude spectra over a
   Hann window (`hann_window`). The command line uses a window of 2048 samples
   and a hop of 1024.
3. `sivana.peaks.find_peaks` returns `Peak` objects: local maxima within a
   neighbourhood of ±2 frames and ±5 bins, with a magnitude of at least 2.0.
4. `sivana.hashing.create_hashes` pairs each anchor peak with up to 5 later
   peaks. A pair is kept when the later peak is 1 to 50 frames after the anchor
   and within 200 bins of it. The two frequency bins and the time gap are packed
   into one integer, which becomes a `Fingerprint`.
5. `sivana.database.query_db_and_match` looks up each query hash. For every
   song it builds a histogram of anchor-time differences, and the song with the
   tallest bar wins. The result is a `MatchResult`, or `None`.

## Library use

```python
from sivana.audio_loader import load_audio_file
from sivana.database import open_db_connection, init_db, enroll_song, list_songs

conn = open_db_connection("fingerprints.sqlite")
init_db(conn)
samples = load_audio_file("song.wav", 22050)
song_id = enroll_song(conn, "Song", "song.wav", samples, 22050, 2048, 1024,
                      (2, 5, 2.0), (1, 50, 200, 5))
for song in list_songs(conn):
    print(song.id, song.name, song.file_path)
```

`get_song_info(conn, song_id)` returns a single `Song`, or `None` if there is no
song with that ID. Database failures raise `DatabaseError`.

## Limitations

- Only WAV files can be read. Compressed formats such as MP3, FLAC or Ogg are
  not decoded.
- There is no command to delete songs, clear the database or show database
  statistics.