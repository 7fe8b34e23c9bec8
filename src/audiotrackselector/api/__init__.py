"""HTTP API for audio track selection."""
