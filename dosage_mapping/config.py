"""Runtime settings for the mapping converter."""

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

ENV_ATOMIC_WRITES = "DOSAGE_MAPPING_ATOMIC_WRITES"
ENV_LOG_LEVEL = "DOSAGE_MAPPING_LOG_LEVEL"

_FALSE_VALUES = {"0", "false", "no", "off"}


class MappingSettings(BaseModel):
    """Settings shared by every mapping call of a converter."""

    atomic_writes: bool = Field(
        default=True,
        description=(
            "Commit a call's writes only when it succeeds. When disabled, "
            "writes go straight to the composition and survive a later failure."
        ),
    )
    log_level: str = Field(
        default="WARNING", description="Log level name used by the CLI."
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level '{v}'")
        return level

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "MappingSettings":
        """Build settings from ``DOSAGE_MAPPING_*`` environment variables."""
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        atomic = env.get(ENV_ATOMIC_WRITES)
        if atomic is not None:
            values["atomic_writes"] = atomic.strip().lower() not in _FALSE_VALUES

        level = env.get(ENV_LOG_LEVEL)
        if level:
            values["log_level"] = level

        return cls(**values)
