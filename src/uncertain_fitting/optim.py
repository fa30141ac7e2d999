from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


class OptimizerError(RuntimeError):
    """A gradient or update step produced non-finite values."""

    def __init__(self, message: str, *, iteration: Optional[int] = None, params=None):
        super().__init__(message)
        self.iteration = iteration
        self.params = None if params is None else np.array(params, dtype=float)


_MOMENTUM_KINDS = ("classic", "nesterov")
_WEIGHT_DECAY_KINDS = ("l2", "decoupled")


@dataclass(frozen=True)
class SgdConfig:
    """Stochastic gradient descent hyperparameters.

    momentum:     None, ("classic", mu) or ("nesterov", mu), 0 <= mu < 1
    weight_decay: None, ("l2", wd) or ("decoupled", wd), wd >= 0
    """

    learning_rate: float = 1e-2
    momentum: Optional[Tuple[str, float]] = None
    weight_decay: Optional[Tuple[str, float]] = None

    def __post_init__(self) -> None:
        lr = float(self.learning_rate)
        if not (math.isfinite(lr) and lr > 0.0):
            raise ValueError(f"learning_rate must be finite and > 0, got {self.learning_rate!r}.")
        object.__setattr__(self, "learning_rate", lr)

        if self.momentum is not None:
            kind, mu = _kind_and_value(self.momentum, "momentum", _MOMENTUM_KINDS)
            if not 0.0 <= mu < 1.0:
                raise ValueError(f"momentum must be in [0, 1), got {mu!r}.")
            object.__setattr__(self, "momentum", (kind, mu))

        if self.weight_decay is not None:
            kind, wd = _kind_and_value(self.weight_decay, "weight_decay", _WEIGHT_DECAY_KINDS)
            if not wd >= 0.0:
                raise ValueError(f"weight_decay must be >= 0, got {wd!r}.")
            object.__setattr__(self, "weight_decay", (kind, wd))


def _kind_and_value(option, label: str, kinds: Tuple[str, ...]) -> Tuple[str, float]:
    if not isinstance(option, tuple) or len(option) != 2:
        raise TypeError(f"{label} must be like ({kinds[0]!r}, value), got {option!r}.")
    kind = str(option[0]).lower()
    if kind not in kinds:
        raise ValueError(f"Unknown {label} kind {option[0]!r}. Available: {kinds}")
    return kind, float(option[1])


class Sgd:
    """SGD update rule with optional momentum and weight decay.

    Holds the velocity buffer for one parameter vector; create one per fit.
    """

    def __init__(self, config: SgdConfig, n_params: int):
        self.config = config
        self.velocity = np.zeros((int(n_params),), dtype=float)

    def step(self, params: np.ndarray, grad: np.ndarray) -> None:
        """Update ``params`` in place. On failure, params and velocity are untouched."""
        cfg = self.config
        g = np.asarray(grad, dtype=float)
        if g.shape != params.shape:
            raise ValueError(f"gradient shape {g.shape} != params shape {params.shape}")

        if cfg.weight_decay is not None and cfg.weight_decay[0] == "l2":
            g = g + cfg.weight_decay[1] * params

        velocity = self.velocity
        if cfg.momentum is None:
            update = cfg.learning_rate * g
        else:
            kind, mu = cfg.momentum
            velocity = g + mu * self.velocity
            if kind == "classic":
                update = cfg.learning_rate * velocity
            else:
                update = cfg.learning_rate * (g + mu * velocity)

        if cfg.weight_decay is not None and cfg.weight_decay[0] == "decoupled":
            update = update + cfg.weight_decay[1] * cfg.learning_rate * params

        new = params - update
        if not np.all(np.isfinite(new)):
            raise OptimizerError("SGD update produced non-finite parameters.", params=params)

        self.velocity = velocity
        params[...] = new
