# reencoder

A command-line tool that keeps a FLAC library encoded with the installed
version of libFLAC.

It walks a folder, reads the vendor tag of every `.flac` file with
`metaflac`, and records what it finds in a small database keyed by each
file's SHA-256 hash. Files that have never been seen before, or that were
written by a different libFLAC version than the installed `flac`, are
reencoded in place with `flac`. Files already reencoded on an earlier run,
or only moved, are left alone.

## Requirements

- Python 3.10 or later
- The `flac` and `metaflac` programs on your `PATH`

## Installation

```
pip install .
```

## Usage

```
reencoder --path /path/to/music
```

Options:

| Option | Meaning |
| --- | --- |
| `-p`, `--path` | Folder with files to reencode (default: `.`) |
| `-d`, `--database` | Folder that holds the database; it must already exist |
| `-a`, `--flac` | An argument passed to `flac` when reencoding; repeat it for more than one |

Extra positional arguments are accepted and ignored.

If no `--flac` argument is given, files are reencoded with `-8f -j4`.

Without `--database` the database is kept in a `reencoder` folder under the
platform's application data directory, created if needed:

- Linux: `~/.local/share/reencoder`
- macOS: `~/Library/Application Support/reencoder`
- Windows: `%APPDATA%\reencoder`

The database is an SQLite file, `entries.sqlite3`, inside that folder.

A run has two stages:

1. Indexing: every `.flac` file below the folder is hashed and recorded, with
   a progress bar, and the number of files to process is reported.
2. Reencoding: database entries whose stored absolute path contains the
   `--path` value as text are considered. Entries for files that no longer
   exist are removed; files marked for processing are reencoded, up to four
   at a time, with a progress bar, and stored again under their new hash.
   A file whose reencode fails is logged and skipped.

Because the second stage matches `--path` as text against stored absolute
paths, giving an absolute path is the most predictable choice.

Pressing Ctrl+C stops the run: no new files are indexed or reencoded,
reencodes already running are allowed to finish, and everything recorded so
far is saved.

On an error (missing `flac` or `metaflac`, a path or database folder that
does not exist, a failing tool) the command prints `reencoder: <message>` to
standard error and exits with status 1.

## Use from Python

The pieces are available as functions:

- `reencoder.cli.init_args(path, database, flac_args)` checks the tools and
  arguments and returns a `RunConfig` and the database folder;
  `reencoder.cli.run(config, database_dir)` runs both stages and returns the
  number of files reencoded.
- `reencoder.operations.index_flacs(config, store, stop_event)` and
  `reencoder.operations.reencode_flacs(config, store, stop_event)` run one
  stage each against a `reencoder.database.Store`; setting the optional
  `threading.Event` stops them.
- `reencoder.operations.parse_encoder_version(vendor_tag)` extracts the
  version from a vendor string such as `reference libFLAC 1.4.3 20230623`.

## Running the tests

```
pip install .[test]
pytest
```