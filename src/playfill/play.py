"""
Playback through an external command-line player.

Each track is handed to the player in turn, e.g. `ffplay -nodisp -autoexit <path>`.
"""

import logging
import subprocess
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


def play_playlist(
    paths: Sequence[str],
    command: List[str],
    timeout_seconds: Optional[float] = None,
) -> bool:
    """
    Play tracks in order with an external player.

    Args:
        paths: Track paths in playback order
        command: Player command; the track path is appended
        timeout_seconds: Max runtime per track (None = no limit)

    Returns:
        True if every track played, False on the first failure
    """
    if not command:
        logger.error("No player command configured")
        return False

    for index, path in enumerate(paths):
        logger.info(f"Playing {index + 1}/{len(paths)}: {path}")
        try:
            result = subprocess.run(
                [*command, path],
                timeout=timeout_seconds,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError:
            logger.error(f"Player not found: {command[0]}")
            return False
        except subprocess.TimeoutExpired:
            logger.error(f"Playback timeout after {timeout_seconds} seconds: {path}")
            return False

        if result.returncode != 0:
            logger.error(f"Player failed with return code {result.returncode} on {path}")
            logger.error(f"Player stderr: {result.stderr if result.stderr else '(no stderr)'}")
            return False

    logger.info(f"Finished playing {len(paths)} tracks")
    return True
