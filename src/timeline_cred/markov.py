"""
Power-iteration solver for the stationary distribution of a transition model
with teleportation to the minting distribution.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .errors import NumericalAnomalyError
from .transition import TransitionModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolverResult:
    scores: np.ndarray
    converged: bool
    iterations: int
    delta: float


class MarkovSolver:
    """
    Each step keeps ``1 - alpha`` of the mass moving along edges and resets
    ``alpha`` of it to the minting distribution. Sink mass is redistributed
    along the minting distribution as well, so total mass stays at 1.
    """

    def __init__(self, alpha: float = 0.2, epsilon: float = 1e-7, max_iterations: int = 1000) -> None:
        if not 0 < alpha <= 1:
            raise ValueError("alpha must be in (0, 1]")
        self.alpha = alpha
        self.epsilon = epsilon
        self.max_iterations = max_iterations

    def step(self, model: TransitionModel, scores: np.ndarray) -> np.ndarray:
        flow = np.bincount(
            model.targets,
            weights=scores[model.sources] * model.probabilities,
            minlength=model.size,
        )
        sink_mass = scores[model.sinks].sum()
        return self.alpha * model.mint + (1 - self.alpha) * (flow + sink_mass * model.mint)

    def solve(self, model: TransitionModel, initial: Optional[np.ndarray] = None) -> SolverResult:
        n = model.size
        if n == 0:
            return SolverResult(scores=np.zeros(0), converged=True, iterations=0, delta=0.0)
        scores = np.full(n, 1.0 / n) if initial is None else np.asarray(initial, dtype=np.float64)
        delta = float("inf")
        for iteration in range(1, self.max_iterations + 1):
            following = self.step(model, scores)
            if not np.all(np.isfinite(following)) or np.any(following < 0):
                raise NumericalAnomalyError(f"score vector became invalid at iteration {iteration}")
            delta = float(np.abs(following - scores).sum())
            scores = following
            if delta < self.epsilon:
                return SolverResult(scores=scores, converged=True, iterations=iteration, delta=delta)
        logger.warning(
            "Solver stopped after %d iterations without converging (delta=%.3g, epsilon=%.3g)",
            self.max_iterations,
            delta,
            self.epsilon,
        )
        return SolverResult(scores=scores, converged=False, iterations=self.max_iterations, delta=delta)
