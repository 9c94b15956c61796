"""Configuration model and YAML helpers for the leader address cache."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, computed_field, field_validator

_SECTION = "leader_address"


class LeaderAddressConfig(BaseModel):
    """Where the leader publishes its address and how callers wait for it."""

    base_path: str = Field(default="/hbase", description="Parent node of all cluster nodes.")
    master_node: str = Field(default="master", description="Name of the leader address node under base_path.")
    default_wait_timeout_ms: int = Field(
        default=0,
        ge=0,
        description="Timeout used by callers that do not pass one (0 waits forever).",
    )
    lock_poll_interval: float = Field(
        default=0.05,
        gt=0,
        description="Seconds between cancellation checks while queued behind another waiter.",
    )

    @field_validator("base_path", mode="before")
    @classmethod
    def _normalize_base_path(cls, value: Any) -> str:
        text = str(value).strip()
        if not text.startswith("/"):
            raise ValueError(f"base_path must be absolute, got {text!r}")
        return "/" + text.strip("/") if text != "/" else "/"

    @field_validator("master_node", mode="before")
    @classmethod
    def _normalize_master_node(cls, value: Any) -> str:
        text = str(value).strip().strip("/")
        if not text:
            raise ValueError("master_node must not be empty")
        return text

    @computed_field  # type: ignore[prop-decorator]
    @property
    def leader_path(self) -> str:
        """Full path of the node holding the leader address."""
        if self.base_path == "/":
            return f"/{self.master_node}"
        return f"{self.base_path}/{self.master_node}"


def _read_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def load_config(path: Optional[Path]) -> LeaderAddressConfig:
    """Load a LeaderAddressConfig from a YAML file.

    The file may hold the fields at top level or nested under a
    ``leader_address`` key.
    """

    if path is None:
        return LeaderAddressConfig()

    resolved = Path(path).expanduser().resolve()
    data = _read_yaml(resolved)
    if _SECTION in data:
        data = data[_SECTION] or {}
    return LeaderAddressConfig.model_validate(data)


def dump_config(config: LeaderAddressConfig, path: Path) -> None:
    """Write a config back to YAML under the ``leader_address`` key."""

    payload = config.model_dump(mode="json", exclude={"leader_path"})
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump({_SECTION: payload}, handle, sort_keys=False)
