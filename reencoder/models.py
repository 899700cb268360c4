"""Records kept for each indexed FLAC file, and the settings of a run."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

DEFAULT_FLAC_ARGS: Tuple[str, ...] = ("-8f", "-j4")


@dataclass
class FileInfo:
    """What the index knows about one FLAC file."""

    abs_path: str
    encoder: str = ""
    process: bool = True

    def to_json(self) -> bytes:
        """Serialise the record the way it is stored in the index."""
        payload = {
            "abspath": self.abs_path,
            "encoder": self.encoder,
            "process": self.process,
        }
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

    @classmethod
    def from_json(cls, data) -> "FileInfo":
        """Build a record from its stored JSON form; missing fields take zero values."""
        obj = json.loads(data)
        if not isinstance(obj, dict):
            raise ValueError("file record must be a JSON object")
        abs_path = obj.get("abspath", "")
        encoder = obj.get("encoder", "")
        process = obj.get("process", False)
        if not isinstance(abs_path, str) or not isinstance(encoder, str):
            raise ValueError("abspath and encoder must be strings")
        if not isinstance(process, bool):
            raise ValueError("process must be a boolean")
        return cls(abs_path=abs_path, encoder=encoder, process=process)


class Evaluation(Enum):
    """Outcome of comparing a file with its stored record."""

    REENCODE_NOT_NEEDED = "file is up to date"
    FILE_MOVED = "file was moved"
    REENCODE_NEEDED = "file needs to be reencoded"


@dataclass(frozen=True)
class RunConfig:
    """Settings shared by indexing and reencoding."""

    path: str
    encoder: str
    flac_args: Optional[Tuple[str, ...]] = DEFAULT_FLAC_ARGS