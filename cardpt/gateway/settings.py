"""
Gateway settings.
"""

from __future__ import annotations
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field


DEFAULT_PROVIDER_TIMEOUT = 30.0

_TRUE_VALUES = {"1", "true", "yes", "on"}


class GatewaySettings(BaseModel):
    """
    Runtime settings for the decision gateway.

    Attributes:
        provider_timeout: Seconds allowed for the single provider call
        log_raw_output: Log raw model text (development only)
    """
    provider_timeout: float = Field(default=DEFAULT_PROVIDER_TIMEOUT, gt=0)
    log_raw_output: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> GatewaySettings:
        """Read CARDPT_PROVIDER_TIMEOUT and CARDPT_LOG_RAW_OUTPUT."""
        env = os.environ if environ is None else environ
        values = {}
        timeout = env.get("CARDPT_PROVIDER_TIMEOUT")
        if timeout:
            values["provider_timeout"] = float(timeout)
        raw = env.get("CARDPT_LOG_RAW_OUTPUT")
        if raw is not None:
            values["log_raw_output"] = raw.strip().lower() in _TRUE_VALUES
        return cls(**values)
