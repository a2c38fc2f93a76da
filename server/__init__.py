"""Hub store HTTP service."""
