"""Application use cases: one entry point per workflow."""
