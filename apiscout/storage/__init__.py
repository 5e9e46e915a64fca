"""Persistence for API docs and credentials."""

from apiscout.storage.filesystem import JsonStorage

__all__ = ["JsonStorage"]
