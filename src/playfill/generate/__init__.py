"""
Playlist Generation Module: seed, refine and export playlists.

- Random seeding until the target duration is reached
- Swap refinement with pluggable acceptance heuristics
- Candidate evaluation on a bounded thread pool
- Output: playlist.m3u and summary JSON
"""

__all__ = ["playlist", "heuristics", "refine", "export"]
