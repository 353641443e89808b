"""Multi-round interview workflow service."""
