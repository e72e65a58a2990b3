"""HTTP API for promread."""
