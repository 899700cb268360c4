"""Indexing and reencoding of FLAC files through the flac tools."""

from __future__ import annotations

import hashlib
import logging
import os
import re
import signal
import subprocess
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator, Optional

from tqdm import tqdm

from .database import Store, decode_info, index_file, update_file
from .models import DEFAULT_FLAC_ARGS, FileInfo, RunConfig

log = logging.getLogger(__name__)

_VENDOR_RE = re.compile(r"libFLAC [0-9]\.[0-9]\.[0-9]")
_WORKERS = 4
_CHUNK = 1 << 20


def reencode_file(info: FileInfo, config: RunConfig) -> None:
    """Reencode one file in place and mark its record as current."""
    args = list(config.flac_args) if config.flac_args is not None else list(DEFAULT_FLAC_ARGS)
    result = subprocess.run(
        ["flac", *args, info.abs_path],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        check=False,
    )
    if result.returncode != 0 and result.returncode != -signal.SIGINT:
        error = subprocess.CalledProcessError(result.returncode, result.args)
        log.error("%s", error)
        raise error
    info.encoder = config.encoder
    info.process = False


def parse_encoder_version(vendor_tag: str) -> str:
    """Extract the libFLAC version from a vendor tag, or "" if there is none."""
    match = _VENDOR_RE.search(vendor_tag)
    if match is None:
        return ""
    return match.group(0).split(" ")[1]


def get_encoder_version(path) -> str:
    result = subprocess.run(
        ["metaflac", "--show-vendor-tag", os.fspath(path)],
        capture_output=True,
        text=True,
        check=True,
    )
    return parse_encoder_version(result.stdout)


def get_info_from_file(path) -> FileInfo:
    return FileInfo(
        abs_path=os.path.abspath(path),
        encoder=get_encoder_version(path),
        process=True,
    )


def file_sha256(path) -> bytes:
    digest = hashlib.sha256()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK), b""):
            digest.update(chunk)
    return digest.digest()


def _extension(name: str) -> str:
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def _walk_flacs(root: str) -> Iterator[str]:
    """Yield .flac files under root in lexical order, not following symlinked dirs."""
    if not os.path.isdir(root):
        if _extension(os.path.basename(root)) == ".flac":
            yield root
        return
    with os.scandir(root) as entries:
        ordered = sorted(entries, key=lambda entry: entry.name)
    for entry in ordered:
        if entry.is_dir(follow_symlinks=False):
            yield from _walk_flacs(entry.path)
        elif _extension(entry.name) == ".flac":
            yield entry.path


def index_flacs(config: RunConfig, store: Store, stop_event: Optional[threading.Event] = None) -> int:
    """Index every FLAC file under the configured path; return how many need reencoding."""
    stop_event = stop_event or threading.Event()
    batch = store.batch()
    to_process = 0
    stopped = False
    with tqdm(desc="Indexing flacs", unit=" files") as bar:
        for path in _walk_flacs(config.path):
            if stop_event.is_set():
                stopped = True
                break
            info = get_info_from_file(path)
            hashsum = file_sha256(path)
            if index_file(info, config, hashsum, batch):
                to_process += 1
            bar.set_postfix(to_process=to_process)
            bar.update(1)
        batch.commit()
        if stopped:
            bar.write("Stopping...")
        else:
            bar.write(f"Done indexing flacs: \t{to_process} to process")
    return to_process


def reencode_flacs(config: RunConfig, store: Store, stop_event: Optional[threading.Event] = None) -> int:
    """Reencode indexed files under the configured path; return how many were reencoded."""
    stop_event = stop_event or threading.Event()
    batch = store.batch()
    jobs = []
    for key, value in store.items():
        if stop_event.is_set():
            break
        try:
            info = decode_info(value)
        except ValueError as exc:
            log.error("%s", exc)
            continue
        if config.path not in info.abs_path:
            continue
        try:
            os.stat(info.abs_path)
        except FileNotFoundError:
            batch.delete(key)
            continue
        except OSError as exc:
            log.error("%s", exc)
            continue
        if info.process:
            jobs.append((key, info))

    reencoded = 0
    with tqdm(total=len(jobs), desc="Reencoding...") as bar:

        def work(key: bytes, info: FileInfo) -> bool:
            if stop_event.is_set():
                return False
            reencode_file(info, config)
            batch.delete(key)
            update_file(info, batch, file_sha256(info.abs_path))
            bar.update(1)
            return True

        with ThreadPoolExecutor(max_workers=_WORKERS) as pool:
            futures = [pool.submit(work, key, info) for key, info in jobs]
            for future in futures:
                try:
                    if future.result():
                        reencoded += 1
                except (OSError, subprocess.SubprocessError) as exc:
                    log.error("%s", exc)
    batch.commit()
    return reencoded