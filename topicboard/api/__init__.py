"""Read-only JSON API over the topic pipeline."""
