from __future__ import annotations

import numpy as np

from ..model import Model


def proportional_func(x, k):
    """Line through the origin: y = k*x."""
    return k * x


def proportional(*, name: str = "proportional") -> Model:
    """Return a y = k*x Model."""

    def grad(x, k):
        return (x,)

    return Model.from_function(proportional_func, name=name, grad=grad)


def straight_line_func(x, m, b):
    """Module-level straight line function y = m*x + b."""
    return m * x + b


def straight_line(*, name: str = "straight line") -> Model:
    """Return a straight line Model."""

    def grad(x, m, b):
        return (x, np.ones_like(x))

    return Model.from_function(straight_line_func, name=name, grad=grad)
