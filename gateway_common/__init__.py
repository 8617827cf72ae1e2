"""Shared building blocks for the metrics query gateway services."""
