"""Adapters for external services: mail API and workflow runner."""
