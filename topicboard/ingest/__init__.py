"""Record store access."""
