"""Binary support vector machine over a linear kernel (inference only)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np


@dataclass(frozen=True)
class LinearKernel:
    """Dot product with an optional constant intercept."""

    constant: float = 0.0

    def __call__(self, x: np.ndarray, y: np.ndarray) -> float:
        return self.constant + float(np.dot(x, y))


@dataclass(frozen=True, eq=False)
class SupportVectorMachine:
    number_of_inputs: int
    support_vectors: Sequence[np.ndarray]
    weights: np.ndarray
    threshold: float
    kernel: LinearKernel = field(default_factory=LinearKernel)

    def __post_init__(self) -> None:
        if self.number_of_inputs < 0:
            raise ValueError(f"number_of_inputs must not be negative (got {self.number_of_inputs})")
        vectors = [np.asarray(v, dtype=np.float64) for v in self.support_vectors]
        weights = np.asarray(self.weights, dtype=np.float64).reshape(-1)
        if len(vectors) != len(weights):
            raise ValueError(
                f"Expected one weight per support vector ({len(vectors)} vectors, {len(weights)} weights)"
            )
        for vector in vectors:
            vector.setflags(write=False)
        weights.setflags(write=False)
        object.__setattr__(self, "support_vectors", tuple(vectors))
        object.__setattr__(self, "weights", weights)
        object.__setattr__(self, "threshold", float(self.threshold))

    @classmethod
    def from_lists(
        cls,
        number_of_inputs: int,
        support_vectors: Sequence[Sequence[float]],
        weights: Sequence[float],
        threshold: float,
    ) -> "SupportVectorMachine":
        return cls(
            number_of_inputs=number_of_inputs,
            support_vectors=[np.asarray(v, dtype=np.float64) for v in support_vectors],
            weights=np.asarray(weights, dtype=np.float64),
            threshold=threshold,
        )

    def score(self, features: Sequence[float]) -> float:
        """Signed decision value: threshold plus weighted kernel responses."""
        x = np.asarray(features, dtype=np.float64).reshape(-1)
        if x.shape[0] != self.number_of_inputs:
            raise ValueError(f"Expected {self.number_of_inputs} inputs, got {x.shape[0]}")
        total = self.threshold
        for weight, vector in zip(self.weights, self.support_vectors):
            if vector.shape[0] != x.shape[0]:
                raise ValueError(
                    f"Support vector length {vector.shape[0]} does not match input length {x.shape[0]}"
                )
            total += float(weight) * self.kernel(vector, x)
        return total

    def decide(self, features: Sequence[float]) -> bool:
        """Positive class when the score is zero or above."""
        return self.score(features) >= 0.0
