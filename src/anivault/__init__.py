"""AniVault Converter.

Watches a downloads folder and turns finished video files into
hardware-encoded HEVC copies in a "to watch" folder, burning in subtitles
of the configured language along the way.
"""

__version__ = "0.1.0"
