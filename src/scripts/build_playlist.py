#!/usr/bin/env python3
"""
Build Playlist Script

Usage: build_playlist.py <target_seconds> [library_path]

Library path defaults to MUSIC_LIBRARY_PATH or data/music.
Outputs: playlist-{timestamp}.m3u and playlist-{timestamp}.json in data/playlists/
"""

import sys
import logging
import os
from pathlib import Path

# Add src/ to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from playfill.config import Config
from playfill.generate.export import read_m3u
from playfill.generate.refine import generate

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def main(argv=None):
    """Main generation entrypoint."""
    argv = sys.argv[1:] if argv is None else argv

    if not argv:
        logger.error("Usage: build_playlist.py <target_seconds> [library_path]")
        return 2

    try:
        target_seconds = float(argv[0])
    except ValueError:
        logger.error(f"Invalid target duration: {argv[0]}")
        return 2

    library_path = argv[1] if len(argv) > 1 else os.getenv("MUSIC_LIBRARY_PATH", "data/music")
    output_dir = os.getenv("PLAYFILL_OUTPUT_DIR", "data/playlists")

    try:
        logger.info(f"🎵 Building {target_seconds:.0f}s playlist from {library_path}")

        config = Config.load()
        logger.info(f"Config loaded: {config}")

        result = generate(library_path, target_seconds, config, output_dir=output_dir)
        if result is None:
            return 1

        m3u_path, summary_path = result
        for path in read_m3u(Path(m3u_path)):
            print(path)

        logger.info(f"✅ Playlist: {m3u_path}")
        logger.info(f"✅ Summary: {summary_path}")
        return 0

    except KeyboardInterrupt:
        logger.warning("Generation interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Generation failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
