"""Outbound API call result models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ResponseTiming(BaseModel):
    """Wall-clock timing of a single request, in epoch milliseconds."""

    start: int
    end: int
    duration: int


class ApiCallResponse(BaseModel):
    """Parsed upstream response."""

    status: int
    status_text: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None
    timing: ResponseTiming

    def to_tool_payload(self) -> dict[str, Any]:
        """Shape returned to MCP callers."""
        return {
            "status": self.status,
            "statusText": self.status_text,
            "headers": self.headers,
            "body": self.body,
            "duration": self.timing.duration,
        }
