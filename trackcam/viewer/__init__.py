"""Qt host integration: event translation and the standalone demo window."""
