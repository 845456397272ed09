#!/usr/bin/env python3
"""
Play Playlist Script

Usage: play_playlist.py <playlist.m3u>

Plays each track in order with the player configured in [playback].
"""

import sys
import logging
from pathlib import Path

# Add src/ to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from playfill.config import Config
from playfill.generate.export import read_m3u
from playfill.play import play_playlist

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def main(argv=None):
    """Main playback entrypoint."""
    argv = sys.argv[1:] if argv is None else argv

    if not argv:
        logger.error("Usage: play_playlist.py <playlist.m3u>")
        return 2

    try:
        config = Config.load()
        paths = read_m3u(Path(argv[0]))
        logger.info(f"▶️  Playing {len(paths)} tracks from {argv[0]}")

        ok = play_playlist(
            paths,
            config["playback"]["command"],
            timeout_seconds=config.get("playback", "timeout_seconds"),
        )
        return 0 if ok else 1

    except KeyboardInterrupt:
        logger.warning("Playback interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Playback failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
