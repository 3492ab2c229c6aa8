"""
Run Settings - Externally configured knobs for a state machine trial.

Values come from code (RunSettings(...)) or from the environment:

    STATEWALK_STEPS               number of steps per trial
    STATEWALK_SHORT               "1"/"true" halves the step count
    STATEWALK_MAX_COSTLY_RETRIES  costly inapplicable attempts per step
    STATEWALK_MAX_FREE_RETRIES    free inapplicable attempts per step
    STATEWALK_MAX_REJECTIONS      rejected steps tolerated per trial
    STATEWALK_MAX_DRAWS           draw limit for the random source
"""

from __future__ import annotations
import os
from typing import Mapping

from pydantic import BaseModel, Field, field_validator


DEFAULT_STEPS = 30
DEFAULT_MAX_COSTLY_RETRIES = 100  # heuristic, tune if needed
DEFAULT_MAX_FREE_RETRIES = 10_000
DEFAULT_MAX_REJECTIONS = 100

_ENV_FIELDS = {
    "steps": "STATEWALK_STEPS",
    "short": "STATEWALK_SHORT",
    "max_costly_retries": "STATEWALK_MAX_COSTLY_RETRIES",
    "max_free_retries": "STATEWALK_MAX_FREE_RETRIES",
    "max_rejections": "STATEWALK_MAX_REJECTIONS",
    "max_draws": "STATEWALK_MAX_DRAWS",
}


class RunSettings(BaseModel):
    """Configuration for a single Repeat call."""
    steps: int = Field(default=DEFAULT_STEPS, ge=1)
    short: bool = False
    max_costly_retries: int = Field(default=DEFAULT_MAX_COSTLY_RETRIES, ge=1)
    max_free_retries: int = Field(default=DEFAULT_MAX_FREE_RETRIES, ge=1)
    max_rejections: int = Field(default=DEFAULT_MAX_REJECTIONS, ge=0)
    max_draws: int | None = Field(default=None, ge=1)

    model_config = {"frozen": True}

    @field_validator("max_draws", mode="before")
    @classmethod
    def _empty_means_unlimited(cls, value):
        if value == "":
            return None
        return value

    @property
    def effective_steps(self) -> int:
        """Step budget after applying short mode."""
        if self.short:
            return max(1, self.steps // 2)
        return self.steps

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RunSettings:
        """
        Build settings from environment variables.

        Unset variables fall back to the defaults. Malformed values
        raise pydantic.ValidationError.
        """
        if environ is None:
            environ = os.environ

        values = {}
        for field_name, var in _ENV_FIELDS.items():
            raw = environ.get(var)
            if raw is not None:
                values[field_name] = raw.strip()

        return cls(**values)
