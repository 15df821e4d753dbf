"""Log output settings."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class LogConfig(BaseModel):
    """Where log records go and how they are rendered.

    ``json`` writes one JSON object per line; ``console`` writes a short
    human-readable line. The file sink, when ``file`` is set, is always JSON.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    level: str = "INFO"
    format: Literal["json", "console"] = "json"
    stream: Any = None  # None -> sys.stdout
    quiet: bool = False
    file: str | None = None
