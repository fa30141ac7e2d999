from __future__ import annotations

import numpy as np

from ..model import Model


def exponential_func(x, k):
    """Pure exponential: y = exp(k*x)."""
    return np.exp(k * x)


def exponential(*, name: str = "exponential") -> Model:
    """Return a y = exp(k*x) Model (dy/dk = x*exp(k*x))."""

    def grad(x, k):
        return (x * np.exp(k * x),)

    return Model.from_function(exponential_func, name=name, grad=grad)
