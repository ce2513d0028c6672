# File: parkalloc/config.py
"""
Configuration for the Parking Allocator

AppConfig holds fixed application constants; LotSettings holds the
per-run settings (lot shape, database, logging), validated with pydantic
and read from the environment when not given explicitly.
"""

import os
from typing import List, Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .domain.models import SlotLayout


class AppConfig:
    """Application configuration"""
    APP_NAME = "Parking Allocator"
    VERSION = "1.0.0"

    # Lot defaults
    DEFAULT_LOT_NAME = "NITHYA"
    DEFAULT_FLOORS = 5
    DEFAULT_SLOTS_PER_FLOOR = 10

    # An in-memory SQLite database lives only as long as the process
    DEFAULT_DATABASE_URL = "sqlite://"

    # Logging
    LOG_DIR = "logs"
    LOG_FILE = "parkalloc.log"
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    DEFAULT_LOG_LEVEL = "INFO"

    # Environment variable names
    ENV_LOT_NAME = "PARKALLOC_LOT_NAME"
    ENV_FLOORS = "PARKALLOC_FLOORS"
    ENV_SLOTS_PER_FLOOR = "PARKALLOC_SLOTS_PER_FLOOR"
    ENV_DATABASE_URL = "DATABASE_URL"
    ENV_LOG_LEVEL = "PARKALLOC_LOG_LEVEL"


class LotSettings(BaseModel):
    """Validated settings for one run of the allocator"""

    model_config = ConfigDict(frozen=True)

    lot_name: str = Field(default=AppConfig.DEFAULT_LOT_NAME, min_length=1)
    floors: int = Field(default=AppConfig.DEFAULT_FLOORS, ge=1)
    slots_per_floor: int = Field(default=AppConfig.DEFAULT_SLOTS_PER_FLOOR, ge=1)
    layout: Optional[List[str]] = None
    database_url: str = AppConfig.DEFAULT_DATABASE_URL
    log_level: str = AppConfig.DEFAULT_LOG_LEVEL

    @field_validator("lot_name")
    @classmethod
    def _lot_name_is_trimmed(cls, value: str) -> str:
        if value != value.strip():
            raise ValueError("lot name must not have surrounding whitespace")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @model_validator(mode="after")
    def _layout_matches_slot_count(self) -> 'LotSettings':
        if self.layout is not None:
            if len(self.layout) != self.slots_per_floor:
                raise ValueError(
                    f"layout has {len(self.layout)} entries but slots_per_floor is {self.slots_per_floor}"
                )
            # Surface unknown category names here rather than at lot construction
            SlotLayout.from_names(self.layout)
        return self

    def slot_layout(self) -> SlotLayout:
        """Layout table shared by every floor"""
        if self.layout is not None:
            return SlotLayout.from_names(self.layout)
        return SlotLayout.standard(self.slots_per_floor)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, **overrides: Any) -> 'LotSettings':
        """
        Build settings from environment variables
        Keyword overrides whose value is not None take precedence
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}

        env_map = {
            "lot_name": AppConfig.ENV_LOT_NAME,
            "floors": AppConfig.ENV_FLOORS,
            "slots_per_floor": AppConfig.ENV_SLOTS_PER_FLOOR,
            "database_url": AppConfig.ENV_DATABASE_URL,
            "log_level": AppConfig.ENV_LOG_LEVEL,
        }
        for field_name, env_name in env_map.items():
            if env.get(env_name):
                values[field_name] = env[env_name]

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
