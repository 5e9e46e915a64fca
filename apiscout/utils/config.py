"""Server settings and MCP client config snippet helpers."""

from __future__ import annotations

import json
import shutil
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from apiscout.utils.state import resolve_storage_dir

DEFAULT_SERVER_NAME = "api-scout"


class ServerSettings(BaseModel):
    """Runtime settings for one server process."""

    storage_dir: Path = Field(default_factory=resolve_storage_dir)
    http_timeout: float = 30.0
    hash_probe_timeout: float = 2.0

    @classmethod
    def from_cli(cls, storage_dir: str | Path | None = None) -> ServerSettings:
        return cls(storage_dir=resolve_storage_dir(storage_dir))


def _resolve_apiscout_command() -> str:
    """Return an absolute ``apiscout`` command path when possible.

    MCP clients often start servers without the user's shell PATH, so an
    absolute path is more likely to work when pasted.
    """
    argv0 = Path(sys.argv[0])
    if argv0.name == "apiscout" and argv0.exists():
        return str(argv0.resolve())

    discovered = shutil.which("apiscout")
    if discovered:
        return discovered

    return "apiscout"


def build_mcp_config_payload(
    *,
    storage_dir: Path,
    server_name: str = DEFAULT_SERVER_NAME,
) -> dict[str, Any]:
    """Build an ``mcpServers`` entry that launches ``apiscout serve``."""
    return {
        "mcpServers": {
            server_name: {
                "command": _resolve_apiscout_command(),
                "args": ["--storage-dir", str(storage_dir.expanduser().resolve()), "serve"],
            }
        }
    }


def render_config_payload(payload: dict[str, Any], fmt: str) -> str:
    """Render a config payload as json or yaml."""
    if fmt == "yaml":
        return yaml.safe_dump(payload, sort_keys=True)
    return json.dumps(payload, indent=2, sort_keys=True)
