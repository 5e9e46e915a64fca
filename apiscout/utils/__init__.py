"""Filesystem, state and configuration helpers."""
