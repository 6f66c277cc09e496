"""Typed payloads exchanged with the voice runtime."""
