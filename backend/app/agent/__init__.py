"""Roadmap generation backed by a chat model."""
