# PlayFill: duration-targeted playlist builder
# Package: src.playfill

__version__ = "1.0.0-dev"
__author__ = "PlayFill Contributors"
__description__ = "Builds playlists that match a target play time from a local music library"

# Module structure:
#   - playfill.catalog   : Library scan and track metadata
#   - playfill.generate  : Seeding, swap refinement, export
#   - playfill.play      : Playback through an external player
#   - playfill.config    : Configuration management
