"""
Refinement driver and end-to-end playlist generation.

`refine` runs a fixed number of swap sweeps over a seeded playlist.
`build_playlist` and `generate` chain scan -> seed -> refine -> export.
"""

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from .heuristics import get_heuristic
from .playlist import Heuristic, Playlist
from .export import write_m3u, write_summary
from ..catalog.scan import scan_library

logger = logging.getLogger(__name__)

# Fractions are resolved to millionths before flooring
_FRACTION_SCALE = 1_000_000


def _portion(count: int, fraction: float) -> int:
    """floor(count * fraction), without float drift on values like 0.29."""
    return count * round(fraction * _FRACTION_SCALE) // _FRACTION_SCALE


def refine(
    playlist: Playlist,
    depth_fraction: float,
    steps_fraction: float,
    passes: int,
    heuristic: Heuristic,
    max_workers: Optional[int] = None,
) -> Playlist:
    """
    Refine a playlist with repeated swap sweeps.

    depth = floor(unused * depth_fraction) candidates per swap and
    steps = floor(used * steps_fraction) positions per sweep are computed once
    from the starting state. Each of `passes` sweeps swaps positions
    0..steps-1 left to right. There is no convergence check.

    Args:
        playlist: Seeded playlist, mutated in place
        depth_fraction: Share of the unused pool sampled per swap [0, 1]
        steps_fraction: Share of used positions visited per sweep [0, 1]
        passes: Number of sweeps
        heuristic: Acceptance function; its cool() is called after each
            pass when it has one
        max_workers: Threads for candidate evaluation (1 = inline)

    Returns:
        The same playlist
    """
    if not 0 <= depth_fraction <= 1:
        raise ValueError(f"depth_fraction must be in [0, 1], got {depth_fraction}")
    if not 0 <= steps_fraction <= 1:
        raise ValueError(f"steps_fraction must be in [0, 1], got {steps_fraction}")
    if passes < 0:
        raise ValueError(f"passes must be non-negative, got {passes}")

    depth = _portion(playlist.unused_len(), depth_fraction)
    steps = _portion(playlist.used_len(), steps_fraction)
    start_distance = playlist.distance()

    logger.info(
        f"Refining: {passes} passes x {steps} steps, depth {depth} "
        f"(distance {start_distance:.0f}s)"
    )

    # Zero steps or depth makes every swap a no-op; passes still run for cooling
    swapping = steps > 0 and depth > 0
    cool = getattr(heuristic, "cool", None)

    if not swapping or max_workers == 1:
        executor = None
    else:
        executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="playfill-eval")

    try:
        for pass_index in range(passes):
            if swapping:
                for i in range(steps):
                    playlist.swap(i, depth, heuristic, executor=executor)

            logger.debug(
                f"Pass {pass_index + 1}/{passes}: {playlist.used_duration:.0f}s "
                f"(distance {playlist.distance():.0f}s)"
            )
            if cool is not None:
                cool()
    finally:
        if executor is not None:
            executor.shutdown(wait=True)

    logger.info(
        f"Refined: {playlist.used_duration:.0f}s, distance "
        f"{start_distance:.0f}s -> {playlist.distance():.0f}s"
    )
    return playlist


def build_playlist(
    library_path: str,
    target_seconds: float,
    config,
    rng: Optional[random.Random] = None,
) -> Playlist:
    """
    Scan a library, seed a playlist and refine it.

    Args:
        library_path: Root directory of the music library
        target_seconds: Desired total duration
        config: Config instance (or dict with the same sections)
        rng: Random source; built from refine.random_seed when None

    Returns:
        Refined Playlist
    """
    refine_cfg = config["refine"]

    if rng is None:
        rng = random.Random(refine_cfg.get("random_seed"))

    catalog = scan_library(library_path, config["library"].get("audio_formats"))
    playlist = Playlist.from_random(catalog.tracks, target_seconds, rng)

    # Probabilistic heuristics get their own source; worker threads never touch the playlist's
    heuristic = get_heuristic(
        refine_cfg.get("heuristic", "greedy"),
        config["annealing"],
        rng=random.Random(rng.getrandbits(64)),
    )

    return refine(
        playlist,
        depth_fraction=refine_cfg.get("depth_percent", 100) / 100,
        steps_fraction=refine_cfg.get("steps_percent", 100) / 100,
        passes=refine_cfg.get("passes", 2),
        heuristic=heuristic,
        max_workers=refine_cfg.get("max_workers"),
    )


def generate(
    library_path: str,
    target_seconds: float,
    config,
    output_dir: str = "data/playlists",
    rng: Optional[random.Random] = None,
) -> Optional[Tuple[str, str]]:
    """
    Build a playlist and write playlist.m3u and summary JSON.

    Args:
        library_path: Root directory of the music library
        target_seconds: Desired total duration
        config: Config instance
        output_dir: Directory to write outputs
        rng: Random source

    Returns:
        Tuple of (m3u_path, summary_path) or None if writing failed
    """
    playlist = build_playlist(library_path, target_seconds, config, rng=rng)

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    playlist_id = f"playfill-{stamp}"
    m3u_path = output_path / f"playlist-{stamp}.m3u"
    summary_path = output_path / f"playlist-{stamp}.json"

    if not write_m3u(playlist.tracks(), m3u_path):
        logger.error("Failed to write M3U")
        return None

    if not write_summary(playlist, playlist_id, summary_path):
        logger.error("Failed to write summary")
        return None

    logger.info(f"Generated {playlist_id}: {playlist.used_len()} tracks")
    return (str(m3u_path), str(summary_path))
