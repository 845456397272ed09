"""
Catalog Module: find audio files and read durations and display metadata.

- Recursive scan filtered by audio format
- Unreadable files are skipped with a warning
"""

__all__ = ["scan", "metadata"]
