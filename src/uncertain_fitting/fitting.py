from __future__ import annotations

from typing import Any, Iterable, Optional, Tuple

import numpy as np

from .data import as_arrays
from .model import Model
from .optim import OptimizerError, Sgd, SgdConfig

WEIGHTINGS = ("none", "inverse_variance", "uncertainty")


def loss_weights(sigma_y: np.ndarray, weighting: str) -> np.ndarray:
    """Per-entry loss weights for a weighting scheme.

    - "none": every residual counts once
    - "inverse_variance": 1 / sigma^2 (chi-square); zero sigma is rejected
    - "uncertainty": the stored value is used as the weight itself
    """
    sigma_y = np.asarray(sigma_y, dtype=float)
    if weighting == "none":
        return np.ones_like(sigma_y)
    if weighting == "inverse_variance":
        if np.any(sigma_y <= 0.0):
            raise ValueError(
                "inverse_variance weighting requires every uncertainty to be > 0."
            )
        return 1.0 / sigma_y**2
    if weighting == "uncertainty":
        return sigma_y.copy()
    raise ValueError(f"Unknown weighting {weighting!r}. Available: {WEIGHTINGS}")


def _loss_and_gradient(
    model: Model, x: np.ndarray, y: np.ndarray, w: np.ndarray, theta: np.ndarray
) -> Tuple[float, np.ndarray]:
    # L = sum w_i r_i^2,  dL/dtheta = 2 sum w_i r_i df/dtheta(x_i)
    y_model = np.broadcast_to(np.asarray(model.eval(x, theta), dtype=float), y.shape)
    r = y_model - y
    J = model.gradient(x, theta)
    loss = float(np.sum(w * r * r))
    grad = 2.0 * np.sum((w * r)[:, None] * J, axis=0)
    return loss, grad


def loss(
    dataset: Iterable[Any], model: Model, params: Any, *, weighting: str = "none"
) -> float:
    """Sum of (weighted) squared residuals of ``model`` at ``params``."""
    return loss_and_gradient(dataset, model, params, weighting=weighting)[0]


def loss_and_gradient(
    dataset: Iterable[Any], model: Model, params: Any, *, weighting: str = "none"
) -> Tuple[float, np.ndarray]:
    """Loss and its gradient with respect to the parameter vector."""
    x, y, sy, _ = as_arrays(dataset)
    w = loss_weights(sy, weighting)
    theta = model.param_vector(params)
    return _loss_and_gradient(model, x, y, w, theta)


def fit(
    dataset: Iterable[Any],
    model: Model,
    iterations: int,
    config: Optional[SgdConfig] = None,
    initial_params: Optional[Any] = None,
    *,
    weighting: str = "none",
) -> np.ndarray:
    """Minimise the summed squared residuals by plain gradient descent.

    Runs exactly ``iterations`` optimiser steps from ``initial_params``
    (zeros if omitted) and returns the final parameter vector as a new array.
    There is no convergence test; pick iterations and learning rate to suit
    the problem.

    Raises
    ------
    OptimizerError
        If the loss, the gradient or an update becomes non-finite.
    """
    iterations = int(iterations)
    if iterations < 0:
        raise ValueError(f"iterations must be >= 0, got {iterations}.")
    if config is None:
        config = SgdConfig()

    x, y, sy, _ = as_arrays(dataset)
    w = loss_weights(sy, weighting)

    if initial_params is None:
        theta = np.zeros((model.n_params,), dtype=float)
    else:
        theta = np.array(model.param_vector(initial_params), dtype=float, copy=True)

    sgd = Sgd(config, model.n_params)
    for it in range(iterations):
        with np.errstate(over="ignore", invalid="ignore"):
            value, grad = _loss_and_gradient(model, x, y, w, theta)
        if not (np.isfinite(value) and np.all(np.isfinite(grad))):
            raise OptimizerError(
                f"Non-finite loss or gradient at iteration {it} "
                f"(loss={value!r}); the fit diverged, try a smaller learning_rate.",
                iteration=it,
                params=theta,
            )
        try:
            with np.errstate(over="ignore", invalid="ignore"):
                sgd.step(theta, grad)
        except OptimizerError as e:
            raise OptimizerError(
                f"{e} (iteration {it}); try a smaller learning_rate.",
                iteration=it,
                params=theta,
            ) from e

    return theta
