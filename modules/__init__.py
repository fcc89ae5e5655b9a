"""Application-wide modules (configuration)."""
