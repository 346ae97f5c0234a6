"""HTTP API for Audio Relay."""
