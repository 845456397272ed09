"""
Library scan: find audio files and read their durations.

Files whose duration cannot be read are skipped with a warning instead of
aborting the scan.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Tuple

import mutagen
from mutagen import MutagenError

from ..generate.playlist import Track

logger = logging.getLogger(__name__)

# Supported audio formats
AUDIO_FORMATS = (".mp3", ".wav", ".ogg", ".flac")


class TrackReadError(Exception):
    """Raised when an audio file's duration cannot be determined."""
    pass


@dataclass
class Catalog:
    """Scanned tracks plus the files that were left out."""

    tracks: List[Track] = field(default_factory=list)
    skipped: List[Tuple[str, str]] = field(default_factory=list)  # (path, reason)

    @property
    def total_duration(self) -> float:
        return sum(t.duration_seconds for t in self.tracks)

    def __len__(self) -> int:
        return len(self.tracks)


def discover_audio_files(library_path: str, formats: Iterable[str] = AUDIO_FORMATS) -> List[Path]:
    """
    Recursively find audio files under a directory.

    Args:
        library_path: Root directory
        formats: Allowed suffixes, e.g. ".mp3" (matched case-insensitively)

    Returns:
        Sorted list of file paths, empty if the root does not exist
    """
    lib_path = Path(library_path)

    if not lib_path.is_dir():
        logger.warning(f"Library path not found: {library_path}")
        return []

    suffixes = {f.lower() if f.startswith(".") else f".{f.lower()}" for f in formats}
    audio_files = [
        p for p in lib_path.rglob("*")
        if p.is_file() and p.suffix.lower() in suffixes
    ]

    logger.info(f"Found {len(audio_files)} audio files in {library_path}")
    return sorted(audio_files)


def read_duration(file_path: str) -> float:
    """
    Get audio file duration in seconds.

    Args:
        file_path: Path to audio file

    Returns:
        Duration in seconds

    Raises:
        TrackReadError: If the file cannot be recognized or read
    """
    try:
        audio = mutagen.File(file_path)
    except (MutagenError, OSError) as e:
        raise TrackReadError(f"Could not read {file_path}: {e}") from e

    if audio is None or audio.info is None:
        raise TrackReadError(f"Unrecognized audio format: {file_path}")

    length = getattr(audio.info, "length", None)
    if length is None or length < 0:
        raise TrackReadError(f"No duration available for {file_path}")

    return float(length)


def scan_library(library_path: str, formats: Iterable[str] = AUDIO_FORMATS) -> Catalog:
    """
    Build the track catalog for a library directory.

    Tracks get keys 0..n-1 in discovery order. Unreadable files are logged
    and recorded in `Catalog.skipped`.

    Args:
        library_path: Root directory
        formats: Allowed suffixes

    Returns:
        Catalog
    """
    catalog = Catalog()

    for file_path in discover_audio_files(library_path, formats):
        try:
            duration = read_duration(str(file_path))
        except TrackReadError as e:
            logger.warning(f"Skipping {file_path}: {e}")
            catalog.skipped.append((str(file_path), str(e)))
            continue

        catalog.tracks.append(Track(len(catalog.tracks), str(file_path), duration))

    logger.info(
        f"Catalog ready: {len(catalog.tracks)} tracks, "
        f"{catalog.total_duration:.0f}s total, {len(catalog.skipped)} skipped"
    )
    return catalog
