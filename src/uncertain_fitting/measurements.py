"""Analytic uncertainty helpers for instrument readings."""

from __future__ import annotations

from typing import Any, Tuple

import numpy as np

from .distribution import uniform
from .integrate import IntegrationStrategy, NewtonCotesQuadrature


def reading_uncertainty(
    resolution: float,
    *,
    span: float = 0.4,
    strategy: IntegrationStrategy | str | None = None,
) -> float:
    """Standard deviation of a reading known only to within a fraction of a division.

    The true value is taken as uniformly distributed over ``span * resolution``
    centred on the reading; its spread comes from the integrated moments of
    that distribution (span=0.4 gives 0.2 * resolution / sqrt(3)).
    """
    half = 0.5 * float(span) * float(resolution)
    if strategy is None:
        strategy = NewtonCotesQuadrature(n=64)
    stats = uniform((-half, half)).calculate_distribution(strategy)
    return stats.std_dev


def ratio_with_uncertainty(
    numerator: Any,
    denominator: Any,
    numerator_sigma: Any,
    denominator_sigma: Any,
) -> Tuple[np.ndarray, np.ndarray]:
    """|n/d| and its first-order propagated standard deviation.

    sigma^2 = (sigma_n / d)^2 + (n * sigma_d / d^2)^2
    """
    n = np.asarray(numerator, dtype=float)
    d = np.asarray(denominator, dtype=float)
    sn = np.asarray(numerator_sigma, dtype=float)
    sd = np.asarray(denominator_sigma, dtype=float)

    ratio = np.abs(n / d)
    sigma = np.sqrt((sn / d) ** 2 + (n / d**2 * sd) ** 2)
    return ratio, sigma
