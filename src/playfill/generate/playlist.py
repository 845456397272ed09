"""
Playlist model: random seeding and swap refinement.

A Playlist partitions a catalog into a `used` list (playback order) and an
`unused` pool. Seeding fills `used` with random draws until the target duration
is reached; `swap` then tries to replace one used track with a better-fitting
track sampled from the pool.

Invariants held before and after every public method:
- `used` and `unused` together hold every catalog track exactly once
- `used_duration` equals the sum of `used` durations
- `target` never changes
"""

import logging
import random
from concurrent.futures import Executor
from dataclasses import dataclass
from functools import reduce
from typing import Callable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# (old_total, new_total, target) -> accept new
Heuristic = Callable[[float, float, float], bool]

# Candidates folded per worker task
CHUNK_SIZE = 64


class PlaylistError(Exception):
    """Base class for playlist engine errors."""
    pass


class InvalidIndexError(PlaylistError, IndexError):
    """Raised when a swap position does not index the used list."""
    pass


@dataclass(frozen=True)
class Track:
    """Catalog entry. `key` is the stable catalog index and the track identity."""

    key: int
    path: str
    duration_seconds: float


# A candidate is a (pool position, track) pair; position -1 marks the track
# taken out of `used`, which is not in the pool.
_Candidate = Tuple[int, Track]


class Playlist:
    """Used/unused partition of a catalog, refined toward a target duration."""

    def __init__(
        self,
        used: List[Track],
        unused: List[Track],
        target: float,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            used: Selected tracks in playback order
            unused: Remaining pool
            target: Desired total duration in seconds
            rng: Random source for all draws (a fresh unseeded one if None)
        """
        if target < 0:
            raise ValueError(f"Target duration must be non-negative, got {target}")

        self.used = used
        self.unused = unused
        self.used_duration = sum(t.duration_seconds for t in used)
        self._target = target
        self.rng = rng if rng is not None else random.Random()

    @property
    def target(self) -> float:
        return self._target

    @classmethod
    def from_random(
        cls,
        catalog: Sequence[Track],
        target: float,
        rng: Optional[random.Random] = None,
    ) -> "Playlist":
        """
        Seed a playlist by drawing random tracks until the target is reached.

        Tracks are drawn uniformly without replacement while the accumulated
        duration is below `target` and the pool is not empty. A target of zero
        gives an empty playlist; a target above the catalog total consumes the
        whole catalog.

        Args:
            catalog: Tracks to choose from (not modified)
            target: Desired total duration in seconds
            rng: Random source owned by the new playlist

        Returns:
            Seeded Playlist
        """
        playlist = cls([], list(catalog), target, rng)
        unused = playlist.unused

        while playlist.used_duration < target and unused:
            i = playlist.rng.randrange(len(unused))
            unused[i], unused[-1] = unused[-1], unused[i]
            track = unused.pop()

            playlist.used.append(track)
            playlist.used_duration += track.duration_seconds

        if playlist.used_duration < target:
            logger.info(
                f"Catalog exhausted before target: {playlist.used_duration:.0f}s "
                f"of {target:.0f}s with {len(playlist.used)} tracks"
            )
        else:
            logger.info(
                f"Seeded playlist: {len(playlist.used)} tracks, "
                f"{playlist.used_duration:.0f}s (target {target:.0f}s)"
            )

        return playlist

    def used_len(self) -> int:
        """Number of tracks in the playlist."""
        return len(self.used)

    def unused_len(self) -> int:
        """Number of catalog tracks not in the playlist."""
        return len(self.unused)

    def tracks(self) -> List[Track]:
        """Copy of the used tracks in playback order."""
        return list(self.used)

    def get(self) -> Tuple[List[str], int]:
        """
        Playlist readout.

        Returns:
            Tuple (paths in playback order, total duration in whole seconds)
        """
        return [t.path for t in self.used], int(self.used_duration)

    def distance(self) -> float:
        """Absolute gap between the current total and the target."""
        return abs(self._target - self.used_duration)

    def swap(
        self,
        position: int,
        sample_size: int,
        heuristic: Heuristic,
        executor: Optional[Executor] = None,
    ) -> "Playlist":
        """
        Try to replace the track at `position` with a sampled pool track.

        Up to `sample_size` distinct pool tracks are drawn with the playlist's
        random source. The track at `position` is the starting incumbent; each
        candidate replaces the incumbent when `heuristic(old_total, new_total,
        target)` accepts it. With an executor, the sample is folded in chunks
        on worker threads and the chunk winners are folded again in order.

        The winner goes back to `position`. If it came from the pool, the
        replaced track takes its slot in `unused`, so both lengths are unchanged.

        Args:
            position: Index into `used`
            sample_size: Candidates to draw (clamped to the pool size)
            heuristic: Acceptance function
            executor: Optional pool for candidate evaluation

        Returns:
            self

        Raises:
            InvalidIndexError: If `position` is not a valid index into `used`
        """
        if not 0 <= position < len(self.used):
            raise InvalidIndexError(
                f"Swap position {position} out of range for {len(self.used)} used tracks"
            )

        sample_size = min(max(sample_size, 0), len(self.unused))
        if sample_size == 0:
            return self

        slots = self.rng.sample(range(len(self.unused)), sample_size)
        candidates: List[_Candidate] = [(slot, self.unused[slot]) for slot in slots]

        original_total = self.used_duration
        removed = self.used.pop(position)
        self.used_duration -= removed.duration_seconds

        incumbent: _Candidate = (-1, removed)
        best = self._evaluate(incumbent, candidates, heuristic, executor)

        slot, winner = best
        self.used.insert(position, winner)

        if slot == -1:
            self.used_duration = original_total
            return self

        self.used_duration += winner.duration_seconds
        self.unused[slot] = removed

        logger.debug(
            f"Swapped position {position}: {removed.duration_seconds:.0f}s -> "
            f"{winner.duration_seconds:.0f}s (total {self.used_duration:.0f}s)"
        )
        return self

    def _evaluate(
        self,
        incumbent: _Candidate,
        candidates: List[_Candidate],
        heuristic: Heuristic,
        executor: Optional[Executor],
    ) -> _Candidate:
        """Fold candidates into one winner, in parallel chunks when an executor is given."""
        base = self.used_duration
        target = self._target

        def prefer(best: _Candidate, current: _Candidate) -> _Candidate:
            old_total = base + best[1].duration_seconds
            new_total = base + current[1].duration_seconds
            if heuristic(old_total, new_total, target):
                return current
            return best

        def fold(chunk: List[_Candidate]) -> _Candidate:
            return reduce(prefer, chunk, incumbent)

        if executor is None or len(candidates) <= CHUNK_SIZE:
            return fold(candidates)

        chunks = [
            candidates[i:i + CHUNK_SIZE]
            for i in range(0, len(candidates), CHUNK_SIZE)
        ]
        return reduce(prefer, executor.map(fold, chunks), incumbent)

    def __repr__(self) -> str:
        return (
            f"Playlist(used={len(self.used)}, unused={len(self.unused)}, "
            f"used_duration={self.used_duration:.0f}s, target={self._target:.0f}s)"
        )
