"""Audio notifications."""
