"""API package: shared schemas and dependencies."""
