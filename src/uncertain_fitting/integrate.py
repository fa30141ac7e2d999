"""Integration strategies + registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, Protocol, Tuple
from warnings import warn

import numpy as np
from scipy.integrate import newton_cotes

ScalarFunction = Callable[[float], float]


class IntegrationStrategy(Protocol):
    """Strategy protocol: approximate the definite integral of f over (a, b)."""

    name: str

    def integrate(self, f: ScalarFunction, support: Tuple[float, float]) -> float: ...


@dataclass(frozen=True)
class RiemannSum:
    """Left-edge Riemann sum over ``n`` equal panels.

    First-order accurate: the error shrinks like (b - a) / n.
    """

    n: int = 1000
    name: ClassVar[str] = "riemann"

    def __post_init__(self) -> None:
        if int(self.n) < 1:
            raise ValueError(f"RiemannSum needs n >= 1 panels, got {self.n!r}.")

    def integrate(self, f: ScalarFunction, support: Tuple[float, float]) -> float:
        a, b = float(support[0]), float(support[1])
        n = int(self.n)
        h = (b - a) / n
        total = 0.0
        for i in range(n):
            total += float(f(a + h * i))
        return total * h


@dataclass(frozen=True)
class NewtonCotesQuadrature:
    """Composite closed Newton-Cotes quadrature.

    The support is split into ``n`` panels and each panel is integrated with
    the closed rule of degree ``order`` (``order=2`` is Simpson's rule,
    ``order=1`` the trapezoid rule). Weights come from
    :func:`scipy.integrate.newton_cotes`.
    """

    n: int = 100
    order: int = 2
    name: ClassVar[str] = "newton_cotes"

    def __post_init__(self) -> None:
        if int(self.n) < 1:
            raise ValueError(f"NewtonCotesQuadrature needs n >= 1 panels, got {self.n!r}.")
        if int(self.order) < 1:
            raise ValueError(f"Newton-Cotes order must be >= 1, got {self.order!r}.")
        if int(self.order) >= 8:
            warn(
                f"Newton-Cotes rules of order {self.order} have negative weights "
                "and are numerically unstable; prefer more panels over a higher order.",
                UserWarning,
                stacklevel=3,
            )

    def _weights(self) -> np.ndarray:
        an, _ = newton_cotes(int(self.order), 1)
        return np.asarray(an, dtype=float)

    def integrate(self, f: ScalarFunction, support: Tuple[float, float]) -> float:
        a, b = float(support[0]), float(support[1])
        n = int(self.n)
        order = int(self.order)

        # n*order sub-intervals; panel k covers nodes k*order .. (k+1)*order.
        m = n * order
        dx = (b - a) / m
        # linspace pins the end nodes to exactly a and b
        nodes = np.linspace(a, b, m + 1)
        values = np.array([float(f(float(t))) for t in nodes], dtype=float)

        w = self._weights()
        total = 0.0
        for k in range(n):
            seg = values[k * order : (k + 1) * order + 1]
            total += float(np.dot(w, seg))
        return total * dx


_INTEGRATORS: Dict[str, Callable[..., IntegrationStrategy]] = {
    "riemann": RiemannSum,
    "newton_cotes": NewtonCotesQuadrature,
}


def get_integrator(name: str, **options: Any) -> IntegrationStrategy:
    """Return an integration strategy by name, configured with ``options``."""
    try:
        factory = _INTEGRATORS[name]
    except KeyError as e:
        raise ValueError(
            f"Unknown integrator {name!r}. Available: {tuple(_INTEGRATORS.keys())}"
        ) from e
    return factory(**options)


def as_integrator(strategy: Any) -> IntegrationStrategy:
    """Accept a strategy instance or a registry name."""
    if isinstance(strategy, str):
        return get_integrator(strategy)
    if not callable(getattr(strategy, "integrate", None)):
        raise TypeError(
            f"Expected an integration strategy or one of {AVAILABLE_INTEGRATORS}, got {strategy!r}."
        )
    return strategy


AVAILABLE_INTEGRATORS = tuple(_INTEGRATORS.keys())
