"""Unified configuration layer for stream sessions.

Goals
-----
* Centralize pacing and buffer defaults (see ``defaults``).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Optional external config file (JSON or YAML) pointed to by
       ``SSE_PACER_CONFIG_FILE``
    3. Environment variables ``SSE_PACER_<FIELD>`` (e.g.
       ``SSE_PACER_BATCH_DIVISOR``)
    4. In-code overrides passed to :func:`get_stream_config`
* Validate the merged mapping once, through pydantic.

External Config File (Optional)
-------------------------------
JSON is tried first, then YAML. Only the ``stream`` section is read:

```
stream:
  frame_interval_seconds: 0.02
  batch_divisor: 20
  idle_timeout_seconds: 120
```
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from .defaults import (
    BATCH_DIVISOR,
    FRAME_INTERVAL_SECONDS,
    PENDING_BUFFER_CAP,
    PENDING_BUFFER_KEEP,
)

CONFIG_FILE_ENV = "SSE_PACER_CONFIG_FILE"
ENV_PREFIX = "SSE_PACER_"


class StreamConfig(BaseModel):
    """Validated pacing and buffering settings for one session.

    Attributes:
        frame_interval_seconds: Delay between scheduler ticks. ``0`` yields to
            the event loop without sleeping (useful in tests).
        batch_divisor: Backlog fraction flushed per tick (``len / divisor``).
        pending_buffer_cap: Pending JSON buffer size that triggers eviction.
        pending_buffer_keep: Trailing window kept on eviction.
        idle_timeout_seconds: Optional read inactivity watchdog.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    frame_interval_seconds: float = Field(default=FRAME_INTERVAL_SECONDS, ge=0.0)
    batch_divisor: int = Field(default=BATCH_DIVISOR, gt=0)
    pending_buffer_cap: int = Field(default=PENDING_BUFFER_CAP, gt=0)
    pending_buffer_keep: int = Field(default=PENDING_BUFFER_KEEP, gt=0)
    idle_timeout_seconds: Optional[float] = Field(default=None, gt=0.0)


def _load_external_config() -> Dict[str, Any]:
    """Return the ``stream`` section of the external config file, if any."""
    path = os.getenv(CONFIG_FILE_ENV)
    if not path:
        return {}
    p = Path(path)
    if not p.is_file():
        return {}
    text = p.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except ValueError:
        data = yaml.safe_load(text) or {}
    section = data.get("stream") if isinstance(data, dict) else None
    return section if isinstance(section, dict) else {}


def _env_overrides() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for name in StreamConfig.model_fields:
        val = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if val is not None and val.strip():
            out[name] = val.strip()
    return out


def get_stream_config(overrides: Optional[Dict[str, Any]] = None) -> StreamConfig:
    """Return the merged, validated :class:`StreamConfig`.

    Merge order (later wins): defaults -> external file -> env vars -> overrides.

    Raises:
        pydantic.ValidationError: when a merged value is out of range.
    """
    cfg: Dict[str, Any] = {}
    cfg |= _load_external_config()
    cfg |= _env_overrides()
    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}
    return StreamConfig(**cfg)


__all__ = ["StreamConfig", "get_stream_config"]
