import numpy as np

from uncertain_fitting import (
    AVAILABLE_INTEGRATORS,
    NewtonCotesQuadrature,
    RiemannSum,
    truncated_normal,
    uniform,
    uniform_stats,
)

support = (-2.0, 3.0)
exact = uniform_stats(support)
print(f"uniform{support}: exact mean={exact.mean:.6f} variance={exact.variance:.6f}")

for strategy in (RiemannSum(n=1000), NewtonCotesQuadrature(n=100, order=2), NewtonCotesQuadrature(n=20, order=4)):
    stats = uniform(support).calculate_distribution(strategy)
    print(f"  {strategy!r}: mean={stats.mean:.9f} variance={stats.variance:.9f}")

# Moments of a derived quantity y = 2x + 1 and of a renormalised normal.
scaled = uniform(support).transform_x(lambda x: 2.0 * x + 1.0).calculate_distribution("newton_cotes")
print("2x + 1:", scaled.mean, scaled.variance)

tn = truncated_normal(0.0, 1.0, (-1.0, 2.0)).calculate_distribution(NewtonCotesQuadrature(n=200, order=4))
print("truncated normal:", tn.mean, "+/-", tn.std_dev)
print("available integrators:", AVAILABLE_INTEGRATORS)

assert np.isclose(scaled.variance, 4.0 * exact.variance)
