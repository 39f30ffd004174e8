"""
Central configuration: cred parameters and process-level settings.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError

WEEK_MS = 7 * 24 * 60 * 60 * 1000


class TimelineCredParameters(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    alpha: float = 0.2
    interval_length_ms: int = WEEK_MS
    decay_constant: float = 0.0
    epsilon: float = 1e-7
    max_iterations: int = 1000
    mode: Literal["scoped", "unscoped"] = "scoped"
    total_mode: Literal["sum", "last"] = "sum"

    @field_validator("alpha")
    @classmethod
    def _alpha_range(cls, value: float) -> float:
        # alpha == 1 is pure minting; alpha == 0 has no unique fixed point.
        if not 0 < value <= 1:
            raise ValueError(f"alpha must be in (0, 1], got {value}")
        return value

    @field_validator("interval_length_ms", "max_iterations")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"must be positive, got {value}")
        return value

    @field_validator("decay_constant")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError(f"must not be negative, got {value}")
        return value

    @field_validator("epsilon")
    @classmethod
    def _epsilon_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError(f"must be positive, got {value}")
        return value


def default_params() -> TimelineCredParameters:
    return TimelineCredParameters()


def resolve_parameters(
    params: Union[TimelineCredParameters, Mapping[str, Any], None] = None,
) -> TimelineCredParameters:
    """
    Fill a partial parameter mapping from ``settings.default_params`` and
    validate the result.

    Raises ConfigurationError naming every offending field.
    """
    if isinstance(params, TimelineCredParameters):
        return params
    try:
        return TimelineCredParameters(**{**settings.default_params.model_dump(), **dict(params or {})})
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigurationError(f"invalid cred parameters: {problems}") from exc


class Settings(BaseModel):
    data_dir: Path = Path(os.getenv("TIMELINE_CRED_DATA_DIR", "data"))
    output_path: Path = Path(os.getenv("TIMELINE_CRED_OUTPUT", str(data_dir / "timeline_cred.json")))
    log_level: str = os.getenv("TIMELINE_CRED_LOG_LEVEL", "INFO")
    default_params: TimelineCredParameters = Field(default_factory=default_params)
    top_k: int = 20


settings = Settings()


def ensure_directories(path: Optional[Path] = None) -> None:
    """
    Create the folder that will hold a result file if missing.
    """
    target = path or settings.output_path
    target.parent.mkdir(parents=True, exist_ok=True)
