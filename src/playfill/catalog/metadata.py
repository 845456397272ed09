"""
Track display metadata (title, artist, album, cover art) via mutagen.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import mutagen
from mutagen import MutagenError
from mutagen.mp4 import MP4Cover

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


@dataclass
class TrackInfo:
    """Display metadata for one track. Missing text fields are "Unknown"."""

    title: str
    artist: str
    album: str
    picture: Optional[bytes]
    mimetype: str
    duration: int  # whole seconds


def _first(tags, key: str) -> Optional[str]:
    if not tags:
        return None
    value = tags.get(key)
    if not value:
        return None
    if isinstance(value, list):
        value = value[0] if value else None
    text = str(value).strip() if value is not None else ""
    return text or None


def _picture(audio) -> Tuple[Optional[bytes], Optional[str]]:
    """Extract the first embedded picture and its mimetype, if any."""
    # FLAC
    pictures = getattr(audio, "pictures", None)
    if pictures:
        return pictures[0].data, pictures[0].mime or None

    tags = getattr(audio, "tags", None)
    if tags is None:
        return None, None

    # ID3 (MP3, WAV)
    getall = getattr(tags, "getall", None)
    if getall is not None:
        frames = getall("APIC")
        if frames:
            return frames[0].data, frames[0].mime or None
        return None, None

    # MP4
    covers = tags.get("covr") if hasattr(tags, "get") else None
    if covers:
        cover = covers[0]
        mime = "image/png" if getattr(cover, "imageformat", None) == MP4Cover.FORMAT_PNG else "image/jpeg"
        return bytes(cover), mime

    return None, None


def read_track_info(file_path: str) -> TrackInfo:
    """
    Read display metadata for a track.

    The title falls back to the file name without extension. Unreadable files
    give a TrackInfo of defaults rather than an error.

    Args:
        file_path: Path to audio file

    Returns:
        TrackInfo
    """
    stem = Path(file_path).stem or None
    title = artist = album = None
    picture, mimetype = None, None
    duration = 0

    try:
        easy = mutagen.File(file_path, easy=True)
        if easy is not None:
            title = _first(easy, "title")
            artist = _first(easy, "artist")
            album = _first(easy, "album")
            if getattr(easy, "info", None) and getattr(easy.info, "length", None):
                duration = int(easy.info.length)

        full = mutagen.File(file_path)
        if full is not None:
            picture, mimetype = _picture(full)
    except (MutagenError, OSError) as e:
        logger.warning(f"Could not read metadata for {file_path}: {e}")

    return TrackInfo(
        title=title or stem or UNKNOWN,
        artist=artist or UNKNOWN,
        album=album or UNKNOWN,
        picture=picture,
        mimetype=mimetype or UNKNOWN,
        duration=duration,
    )


def display_name(info: TrackInfo) -> str:
    """Label as Artist - Title, or the title alone when the artist is unknown."""
    if info.artist == UNKNOWN:
        return info.title
    return f"{info.artist} - {info.title}"
