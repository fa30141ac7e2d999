from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Tuple
from warnings import warn

from .integrate import IntegrationStrategy, as_integrator

try:
    import uncertainties
except Exception:  # pragma: no cover - optional at import time
    uncertainties = None


__all__ = [
    "InvalidSupportError",
    "DistributionStats",
    "BoundedDistribution",
    "uniform",
    "uniform_stats",
    "truncated_normal",
]


class InvalidSupportError(ValueError):
    """Raised when a support interval is empty, inverted or not finite."""


def _identity(x: float) -> float:
    return x


def _square(x: float) -> float:
    return x * x


def _checked_support(support: Tuple[float, float]) -> Tuple[float, float]:
    try:
        a, b = support
    except (TypeError, ValueError) as e:
        raise InvalidSupportError(f"support must be a pair (a, b), got {support!r}.") from e
    a = float(a)
    b = float(b)
    if not (math.isfinite(a) and math.isfinite(b)):
        raise InvalidSupportError(f"support ({a}, {b}) must have finite ends.")
    if not a < b:
        raise InvalidSupportError(f"empty support: require a < b, got ({a}, {b}).")
    return a, b


@dataclass(frozen=True)
class DistributionStats:
    """First two moments of a distribution."""

    mean: float
    variance: float

    @property
    def std_dev(self) -> float:
        """Square root of the variance; nan if cancellation made it negative."""
        if self.variance < 0.0:
            return float("nan")
        return math.sqrt(self.variance)

    @property
    def u(self):
        """Return the moments as an uncertainties ufloat (mean +/- std_dev)."""
        if uncertainties is None:
            raise RuntimeError("uncertainties package is not available.")
        return uncertainties.ufloat(self.mean, self.std_dev)


@dataclass(frozen=True)
class BoundedDistribution:
    """A density on a finite support, plus a transform of the random variable.

    ``expected_value`` integrates ``pdf(x) * transform(x)`` over the support.
    The pdf is assumed to be normalised on the support; nothing checks it.
    """

    support: Tuple[float, float]
    pdf: Callable[[float], float]
    transform: Callable[[float], float] = field(default=_identity)

    def __post_init__(self) -> None:
        object.__setattr__(self, "support", _checked_support(self.support))

    def transform_x(self, g: Callable[[float], float]) -> "BoundedDistribution":
        """Return a distribution whose evaluated quantity is g(transform(x))."""
        f = self.transform

        def composed(x: float) -> float:
            return g(f(x))

        return BoundedDistribution(self.support, self.pdf, composed)

    def expected_value(self, strategy: IntegrationStrategy | str) -> float:
        integrator = as_integrator(strategy)
        pdf = self.pdf
        f = self.transform

        def integrand(x: float) -> float:
            return f(x) * pdf(x)

        return float(integrator.integrate(integrand, self.support))

    def calculate_distribution(self, strategy: IntegrationStrategy | str) -> DistributionStats:
        """Mean and variance via E[X] and E[X^2].

        variance = E[X^2] - E[X]^2 suffers from cancellation when the spread is
        small next to the mean; a negative result is returned as computed.
        """
        integrator = as_integrator(strategy)
        mean = self.expected_value(integrator)
        second = self.transform_x(_square).expected_value(integrator)
        variance = second - mean**2
        if variance < 0.0:
            warn(
                f"Computed variance {variance:.3g} is negative (cancellation in "
                "E[X^2] - E[X]^2); increase the integration resolution.",
                RuntimeWarning,
                stacklevel=2,
            )
        return DistributionStats(mean=float(mean), variance=float(variance))


def uniform(support: Tuple[float, float]) -> BoundedDistribution:
    """Uniform density 1/(b-a) on [a, b], zero elsewhere."""
    a, b = _checked_support(support)
    width = b - a

    def pdf(x: float) -> float:
        return (1.0 if a <= x <= b else 0.0) / width

    return BoundedDistribution((a, b), pdf)


def uniform_stats(support: Tuple[float, float]) -> DistributionStats:
    """Closed-form moments of the uniform distribution on [a, b]."""
    a, b = _checked_support(support)
    return DistributionStats(mean=(a + b) / 2.0, variance=(b - a) ** 2 / 12.0)


def truncated_normal(
    mean: float, sigma: float, support: Tuple[float, float]
) -> BoundedDistribution:
    """Normal(mean, sigma) restricted to the support and renormalised there."""
    import scipy.stats

    a, b = _checked_support(support)
    sigma = float(sigma)
    if not (math.isfinite(sigma) and sigma > 0.0):
        raise ValueError(f"sigma must be finite and > 0, got {sigma!r}.")

    rv = scipy.stats.norm(float(mean), sigma)
    mass = float(rv.cdf(b) - rv.cdf(a))
    if not mass > 0.0:
        raise InvalidSupportError(
            f"support ({a}, {b}) carries no probability mass for Normal({mean}, {sigma})."
        )

    def pdf(x: Any) -> float:
        if x < a or x > b:
            return 0.0
        return float(rv.pdf(x)) / mass

    return BoundedDistribution((a, b), pdf)

