"""Console display helpers (Rich tables and colored messages)."""
