"""HTTP service mode."""
