"""
Data models for nodes, edges, weights, and time intervals.
"""
from __future__ import annotations

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .address import Address, from_parts


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)


class WeightPair(_Frozen):
    forward: float = Field(1.0, ge=0.0)
    backward: float = Field(1.0, ge=0.0)

    def scaled(self, other: "WeightPair") -> "WeightPair":
        # Products are range-checked by the transition builder.
        return WeightPair.model_construct(
            forward=self.forward * other.forward, backward=self.backward * other.backward
        )


class Node(_Frozen):
    address: Tuple[str, ...]
    timestamp_ms: Optional[int] = None
    description: str = ""

    @field_validator("address", mode="before")
    @classmethod
    def _check_address(cls, value):
        return from_parts(value)


class Edge(_Frozen):
    address: Tuple[str, ...]
    src: Tuple[str, ...]
    dst: Tuple[str, ...]
    timestamp_ms: Optional[int] = None
    weights: WeightPair = Field(default_factory=WeightPair)

    @field_validator("address", "src", "dst", mode="before")
    @classmethod
    def _check_address(cls, value):
        return from_parts(value)


class NodeType(_Frozen):
    """A named node category; its prefix selects the nodes it mints for."""

    name: str
    prefix: Tuple[str, ...]
    default_weight: float = Field(0.0, ge=0.0)


class EdgeType(_Frozen):
    name: str
    prefix: Tuple[str, ...]
    default_weight: WeightPair = Field(default_factory=WeightPair)


class Interval(_Frozen):
    start_time_ms: int
    end_time_ms: int

    @model_validator(mode="after")
    def _check_bounds(self) -> "Interval":
        if self.start_time_ms >= self.end_time_ms:
            raise ValueError(
                f"interval start {self.start_time_ms} must precede end {self.end_time_ms}"
            )
        return self


def node(*parts: str, timestamp_ms: Optional[int] = None, description: str = "") -> Node:
    return Node(address=parts, timestamp_ms=timestamp_ms, description=description)


def edge(
    address: Address,
    src: Address,
    dst: Address,
    *,
    timestamp_ms: Optional[int] = None,
    forward: float = 1.0,
    backward: float = 1.0,
) -> Edge:
    return Edge(
        address=address,
        src=src,
        dst=dst,
        timestamp_ms=timestamp_ms,
        weights=WeightPair(forward=forward, backward=backward),
    )
