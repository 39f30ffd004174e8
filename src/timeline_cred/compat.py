"""
Version-tagged JSON envelopes.

A stored document is ``[{"type": ..., "version": ...}, payload]``. Reading an
older version runs the upgrade registered for it; each upgrade hands its
output to the next one, so any historical shape reaches the current one.
"""
from __future__ import annotations

import math
from typing import Any, Callable, Dict, List, Mapping

from pydantic import BaseModel, ConfigDict

from .config import TimelineCredParameters, resolve_parameters
from .errors import CompatError

Upgrade = Callable[[Any], Any]


class CompatInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    version: str


def to_compat(info: CompatInfo, payload: Any) -> List[Any]:
    return [info.model_dump(), payload]


def from_compat(info: CompatInfo, data: Any, upgrades: Mapping[str, Upgrade] | None = None) -> Any:
    if not isinstance(data, list) or len(data) != 2 or not isinstance(data[0], dict):
        raise CompatError(f"expected a [{info.type}] compat envelope")
    header, payload = data
    if header.get("type") != info.type:
        raise CompatError(f"expected type {info.type!r}, got {header.get('type')!r}")
    version = header.get("version")
    if version == info.version:
        return payload
    upgrade = (upgrades or {}).get(version)
    if upgrade is None:
        raise CompatError(f"{info.type}: unsupported version {version!r}")
    return upgrade(payload)


PARAMS_COMPAT = CompatInfo(type="timeline-cred/params", version="0.3.0")


def _params_from_020(p: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "epsilon": 1e-7,
        "maxIterations": 1000,
        "mode": "scoped",
        "totalMode": "sum",
        **p,
    }


def _params_from_010(p: Dict[str, Any]) -> Dict[str, Any]:
    # intervalDecay was the fraction of weight lost per elapsed interval.
    lost = p.get("intervalDecay", 0.0)
    if not 0 <= lost < 1:
        raise CompatError(f"intervalDecay must be in [0, 1), got {lost}")
    upgraded = {k: v for k, v in p.items() if k != "intervalDecay"}
    upgraded.setdefault("intervalLengthMs", 7 * 24 * 60 * 60 * 1000)
    upgraded["decayConstant"] = -math.log1p(-lost) if lost else 0.0
    return _params_from_020(upgraded)


PARAMS_UPGRADES: Dict[str, Upgrade] = {
    "0.1.0": _params_from_010,
    "0.2.0": _params_from_020,
}

_PARAM_KEYS = {
    "alpha": "alpha",
    "intervalLengthMs": "interval_length_ms",
    "decayConstant": "decay_constant",
    "epsilon": "epsilon",
    "maxIterations": "max_iterations",
    "mode": "mode",
    "totalMode": "total_mode",
}


def params_to_json(params: TimelineCredParameters) -> List[Any]:
    dumped = params.model_dump()
    return to_compat(PARAMS_COMPAT, {camel: dumped[snake] for camel, snake in _PARAM_KEYS.items()})


def params_from_json(data: Any) -> TimelineCredParameters:
    payload = from_compat(PARAMS_COMPAT, data, PARAMS_UPGRADES)
    unknown = set(payload) - set(_PARAM_KEYS)
    if unknown:
        raise CompatError(f"unknown parameter fields: {sorted(unknown)}")
    return resolve_parameters({_PARAM_KEYS[k]: v for k, v in payload.items()})
