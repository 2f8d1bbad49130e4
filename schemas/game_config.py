"""
Pydantic schemas for room configuration.
"""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "SHAPEDROP_"


def _env(name: str) -> Optional[str]:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


class RoomConfig(BaseModel):
    """Configuration for a Shape Drop room."""
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "template_count": 6,
                "small_template_quota": 4,
                "small_template_max_size": 4,
                "cpu_player_name": "CPU (Easy)",
                "seed": 42,
            }
        },
    )

    template_count: int = Field(default=6, ge=1, le=18, description="Templates active per round")
    small_template_quota: int = Field(default=4, ge=0, description="Templates drawn from the small pool first")
    small_template_max_size: int = Field(default=4, ge=3, le=6, description="Largest template size in the small pool")
    cpu_player_name: str = Field(default="CPU (Easy)", min_length=1)
    seed: Optional[int] = Field(default=None, description="Seed for template draws and computer tie-breaks")

    @classmethod
    def from_env(cls) -> "RoomConfig":
        """
        Build a config from SHAPEDROP_* environment variables.

        Unset or blank variables fall back to the defaults.
        """
        values = {}
        for field_name, env_name in (
            ("template_count", "TEMPLATE_COUNT"),
            ("small_template_quota", "SMALL_TEMPLATE_QUOTA"),
            ("small_template_max_size", "SMALL_TEMPLATE_MAX_SIZE"),
            ("cpu_player_name", "CPU_NAME"),
            ("seed", "SEED"),
        ):
            raw = _env(env_name)
            if raw is not None:
                values[field_name] = raw
        return cls(**values)
