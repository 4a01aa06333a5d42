"""
App Config — Runtime settings editable from the admin API.

Stored in data/config.json.
"""

from __future__ import annotations

from typing import Any, Dict, Literal

from pydantic import BaseModel, Field

# prefer_source is the only strategy the sync path knows how to honour:
# fast-forward only, divergence is reported. The value is kept so the
# admin UI can round-trip it.
ConflictStrategy = Literal["prefer_source", "prefer_mirror", "manual"]


class AppConfig(BaseModel):
    """Editable configuration."""

    auto_sync: bool = True
    sync_interval: int = Field(default=3600, ge=60)
    conflict_strategy: ConflictStrategy = "prefer_source"
    log_level: Literal["debug", "info", "warning", "error"] = "info"
    log_retention_days: int = Field(default=30, ge=1)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
