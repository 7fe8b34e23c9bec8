"""Audio track selection for media playback clients."""

__version__ = "0.3.0"
