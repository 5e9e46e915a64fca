"""Outbound HTTP execution."""

from apiscout.core.http.executor import RequestExecutor

__all__ = ["RequestExecutor"]
