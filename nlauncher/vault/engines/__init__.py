"""Secret backend implementations."""
