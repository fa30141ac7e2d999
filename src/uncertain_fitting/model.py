from __future__ import annotations

import inspect
from dataclasses import dataclass, replace
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple

import numpy as np

Gradient = Callable[..., Sequence[Any]]


def infer_param_names(func: Callable[..., Any]) -> Tuple[str, ...]:
    """Infer parameter names from a function signature.

    Conventions:
    - first arg is the independent variable (x)
    - remaining positional/keyword parameters are fit parameters
    - no *args/**kwargs
    """
    sig = inspect.signature(func)
    params = list(sig.parameters.values())

    if len(params) < 2:
        raise TypeError("Model function must have at least (x, p1, ...).")

    bad_kinds = {inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD}
    for p in params:
        if p.kind in bad_kinds:
            raise TypeError("*args/**kwargs are not supported in model functions.")

    names = [p.name for p in params[1:]]
    if len(set(names)) != len(names):
        raise TypeError("Duplicate parameter names in function signature.")
    return tuple(names)


@dataclass(frozen=True)
class Model:
    """A parametric function y = f(x; theta) that can report dy/dtheta.

    ``func`` is called as ``func(x, *theta)`` and should broadcast over x.
    ``grad`` (optional) is called the same way and returns one partial
    derivative per parameter; without it, gradients are central differences.
    """

    name: str
    func: Callable[..., Any]
    param_names: Tuple[str, ...]
    grad: Optional[Gradient] = None
    diff_step: float = 1e-6

    # ---- constructor ----
    @staticmethod
    def from_function(
        func: Callable[..., Any],
        *,
        name: Optional[str] = None,
        grad: Optional[Gradient] = None,
    ) -> "Model":
        """Construct a Model from a plain function signature."""
        return Model(
            name=name or getattr(func, "__name__", "model"),
            func=func,
            param_names=infer_param_names(func),
            grad=grad,
        )

    def with_gradient(self, grad: Gradient) -> "Model":
        """Return a new Model that uses an analytic gradient."""
        return replace(self, grad=grad)

    @property
    def n_params(self) -> int:
        return len(self.param_names)

    # ---- evaluation ----
    def param_vector(self, params: Any) -> np.ndarray:
        """Return params (sequence or name mapping) as a float vector of length N."""
        if isinstance(params, Mapping):
            missing = [n for n in self.param_names if n not in params]
            if missing:
                raise TypeError(f"Missing parameter values for: {missing}")
            params = [params[n] for n in self.param_names]
        theta = np.asarray(params, dtype=float).reshape(-1)
        if theta.shape != (self.n_params,):
            raise ValueError(
                f"{self.name!r} expects {self.n_params} parameters {self.param_names}, "
                f"got shape {np.shape(params)}."
            )
        return theta

    def eval(self, x: Any, params: Any) -> Any:
        """Evaluate the model at x for a parameter vector (or name mapping)."""
        theta = self.param_vector(params)
        return self.func(x, *theta)

    def gradient(self, x: Any, params: Any) -> np.ndarray:
        """Return d f(x; theta) / d theta with shape x.shape + (N,)."""
        theta = self.param_vector(params)
        x_arr = np.asarray(x, dtype=float)

        if self.grad is not None:
            parts = self.grad(x_arr, *theta)
            if len(parts) != self.n_params:
                raise ValueError(
                    f"Gradient of {self.name!r} returned {len(parts)} partials, "
                    f"expected {self.n_params}."
                )
            cols = [np.broadcast_to(np.asarray(p, dtype=float), x_arr.shape) for p in parts]
            return np.stack(cols, axis=-1)

        # Central-difference derivative: J_j = (f(theta + e_j) - f(theta - e_j)) / 2 eps_j
        J = np.empty(x_arr.shape + (self.n_params,), dtype=float)
        for j in range(self.n_params):
            eps = float(self.diff_step) * (abs(theta[j]) + 1.0)
            t_plus = theta.copy()
            t_minus = theta.copy()
            t_plus[j] += eps
            t_minus[j] -= eps
            f_plus = np.asarray(self.func(x_arr, *t_plus), dtype=float)
            f_minus = np.asarray(self.func(x_arr, *t_minus), dtype=float)
            J[..., j] = np.broadcast_to((f_plus - f_minus) / (2.0 * eps), x_arr.shape)
        return J
