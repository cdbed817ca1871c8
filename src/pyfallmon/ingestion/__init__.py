"""Turn raw sensor feed snapshots into fall notifications."""
