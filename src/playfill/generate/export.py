"""
Playlist export: extended M3U and JSON summary.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List

from .playlist import Playlist, Track
from ..catalog.metadata import display_name, read_track_info

logger = logging.getLogger(__name__)


def write_m3u(tracks: List[Track], output_path: Path) -> bool:
    """
    Write an extended M3U playlist file.

    Each #EXTINF label comes from the track's tags ("Artist - Title"),
    falling back to the file name when the file has no title tag.

    Args:
        tracks: Tracks in playback order
        output_path: Output M3U file path

    Returns:
        True if successful, False otherwise
    """
    try:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write("#EXTM3U\n")
            for track in tracks:
                label = display_name(read_track_info(track.path))
                f.write(f"#EXTINF:{int(track.duration_seconds)},{label}\n")
                f.write(f"{track.path}\n")
        logger.info(f"Wrote playlist: {output_path}")
        return True
    except OSError as e:
        logger.error(f"Failed to write M3U: {e}")
        return False


def read_m3u(m3u_path: Path) -> List[str]:
    """Track paths listed in an M3U file, in order; comment lines are skipped."""
    with open(m3u_path, "r", encoding="utf-8") as f:
        return [
            line.strip() for line in f
            if line.strip() and not line.startswith("#")
        ]


def write_summary(playlist: Playlist, playlist_id: str, output_path: Path) -> bool:
    """
    Write a JSON summary of a finished playlist.

    Args:
        playlist: Refined playlist
        playlist_id: Unique identifier for this playlist
        output_path: Output JSON file path

    Returns:
        True if successful, False otherwise
    """
    try:
        summary = {
            "playlist_id": playlist_id,
            "target_seconds": playlist.target,
            "total_seconds": playlist.used_duration,
            "generated_at": datetime.now().isoformat(),
            "tracks": [
                {"path": t.path, "duration_seconds": t.duration_seconds}
                for t in playlist.tracks()
            ],
        }
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(summary, f, indent=2)
        logger.info(f"Wrote summary: {output_path}")
        return True
    except OSError as e:
        logger.error(f"Failed to write summary: {e}")
        return False
