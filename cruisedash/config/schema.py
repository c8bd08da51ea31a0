from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..plugins.base import PluginFilterPolicy

logger = logging.getLogger(__name__)


class DashboardBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class PluginOverride(DashboardBaseModel):
    enabled: Optional[bool] = None
    config: Dict[str, Any] = Field(default_factory=dict)


class PluginsConfig(DashboardBaseModel):
    manifest: Optional[str] = None
    filter_policy: PluginFilterPolicy = Field(default=PluginFilterPolicy.ALL)
    overrides: Dict[str, PluginOverride] = Field(default_factory=dict)


class DashboardConfig(DashboardBaseModel):
    base_url: str = Field(default="")
    farm_file: str = Field(default="./configs/farm.yaml")
    templates_dir: Optional[str] = None
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @field_validator("base_url")
    @classmethod
    def strip_base_url(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("farm_file")
    @classmethod
    def normalize_farm_file(cls, value: str) -> str:
        if not value:
            raise ValueError("farm_file must be provided")
        return str(Path(value))

    def dump(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True, mode="json")


def load_config(path: Union[str, Path] = "./configs/dashboard.yaml") -> DashboardConfig:
    """Read a YAML config file; a missing file yields the defaults."""
    config_path = Path(path)
    if not config_path.exists():
        logger.debug("Config %s not found; using defaults", config_path)
        return DashboardConfig()
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    return DashboardConfig.model_validate(raw)
