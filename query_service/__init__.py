"""Metrics query gateway service."""
