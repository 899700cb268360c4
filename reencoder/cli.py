"""Command line entry point: index a folder of FLAC files and reencode stale ones."""

from __future__ import annotations

import argparse
import os
import shutil
import signal
import subprocess
import sys
import threading
from typing import Optional, Sequence, Tuple

from .database import Store
from .models import DEFAULT_FLAC_ARGS, RunConfig
from .operations import index_flacs, reencode_flacs


def local_storage_dir(platform: Optional[str] = None) -> str:
    """Return the per-user application data folder, or "" when unknown."""
    platform = sys.platform if platform is None else platform
    if platform == "win32":
        return os.environ.get("APPDATA", "")
    if platform.startswith("linux"):
        return os.path.join(os.path.expanduser("~"), ".local", "share")
    if platform == "darwin":
        return os.path.join(os.path.expanduser("~"), "Library", "Application Support")
    return ""


def resolve_database(database: Optional[str]) -> str:
    """Pick the database directory: the given one, which must exist, or the default."""
    if not database:
        local = local_storage_dir()
        if not local:
            raise RuntimeError("failed to locate application data folder")
        return os.path.join(local, "reencoder")
    os.stat(database)
    return database


def check_tools() -> None:
    if shutil.which("flac") is None:
        raise RuntimeError("missing flac executable")
    if shutil.which("metaflac") is None:
        raise RuntimeError("missing metaflac executable")


def parse_flac_version(output: str) -> str:
    """Extract the version from the output of "flac -v"."""
    parts = output.split(" ")
    if len(parts) < 2:
        raise ValueError(f"unexpected flac version output: {output!r}")
    return parts[1].replace("\n", "")


def init_args(path, database, flac_args) -> Tuple[RunConfig, str]:
    """Validate the environment and arguments; return the run settings and database directory."""
    check_tools()
    path = os.fspath(path)
    os.stat(path)
    database_dir = resolve_database(os.fspath(database) if database else None)
    result = subprocess.run(["flac", "-v"], capture_output=True, text=True, check=True)
    encoder = parse_flac_version(result.stdout)
    args = tuple(flac_args) if flac_args is not None else DEFAULT_FLAC_ARGS
    return RunConfig(path=path, encoder=encoder, flac_args=args), database_dir


def run(config: RunConfig, database_dir) -> int:
    """Index and reencode; Ctrl-C stops the run cleanly. Return how many files were reencoded."""
    stop_event = threading.Event()
    installed = threading.current_thread() is threading.main_thread()
    previous = signal.signal(signal.SIGINT, lambda *_: stop_event.set()) if installed else None
    try:
        with Store(database_dir) as store:
            index_flacs(config, store, stop_event)
            reencoded = reencode_flacs(config, store, stop_event)
            store.sync()
    finally:
        if installed:
            signal.signal(signal.SIGINT, previous)
    return reencoded


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reencoder",
        usage="reencoder /path/to/folder",
        description="indexes files, checks for encoder and reencodes",
    )
    parser.add_argument("args", nargs="*", help="additional arguments (ignored)")
    parser.add_argument("-p", "--path", default=".", help="Path to folder with files to reencode")
    parser.add_argument("-d", "--database", default=None, help="Path to database")
    parser.add_argument(
        "-a",
        "--flac",
        action="append",
        default=None,
        help="Flac arguments to use when reencoding, can be used multiple times",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    options = build_parser().parse_args(argv)
    try:
        config, database_dir = init_args(options.path, options.database, options.flac)
        run(config, database_dir)
    except (OSError, RuntimeError, ValueError, subprocess.SubprocessError) as exc:
        print(f"reencoder: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())