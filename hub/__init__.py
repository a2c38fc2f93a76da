"""Identity hub storage."""
