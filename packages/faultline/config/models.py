"""Typed configuration models for faultline."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..categories import Category
from ..stack import MAX_STACK_FRAMES

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "faultline" / "faultline.yaml"


class LoggingSettings(BaseModel):
    """Stdout logging options applied by ``configure``."""

    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    include_stacks: bool = True
    service: str | None = None
    environment: str | None = None

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class StackSettings(BaseModel):
    """Snapshot depth used by every stack capture in the process."""

    model_config = ConfigDict(extra="forbid")

    max_frames: int = Field(default=MAX_STACK_FRAMES, ge=1, le=MAX_STACK_FRAMES)


class ClassificationSettings(BaseModel):
    """Id rules installed as the process-wide classifier.

    ``id_patterns`` (globs) are tried before ``id_contains`` (substrings); each
    mapping keeps its file order.
    """

    model_config = ConfigDict(extra="forbid")

    id_patterns: dict[str, Category] = Field(default_factory=dict)
    id_contains: dict[str, Category] = Field(default_factory=dict)


class FaultlineSettings(BaseModel):
    """Root settings resolved from CLI params, env, YAML and defaults."""

    model_config = ConfigDict(extra="ignore")

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    stacks: StackSettings = Field(default_factory=StackSettings)
    classification: ClassificationSettings = Field(
        default_factory=ClassificationSettings
    )
