"""uncertain_fitting public API."""
from .data import DataEntry, from_arrays
from .distribution import (
    BoundedDistribution,
    DistributionStats,
    InvalidSupportError,
    truncated_normal,
    uniform,
    uniform_stats,
)
from .fitting import fit, loss
from .integrate import (
    AVAILABLE_INTEGRATORS,
    IntegrationStrategy,
    NewtonCotesQuadrature,
    RiemannSum,
    get_integrator,
)
from .measurements import ratio_with_uncertainty, reading_uncertainty
from .model import Model
from .montecarlo import MonteCarloResult, ParamEstimate, fit_with_std_dev
from .optim import OptimizerError, SgdConfig
from .plotting import plot_fit
from . import models

__all__ = [
    "AVAILABLE_INTEGRATORS",
    "BoundedDistribution",
    "DataEntry",
    "DistributionStats",
    "IntegrationStrategy",
    "InvalidSupportError",
    "Model",
    "MonteCarloResult",
    "NewtonCotesQuadrature",
    "OptimizerError",
    "ParamEstimate",
    "RiemannSum",
    "SgdConfig",
    "fit",
    "fit_with_std_dev",
    "from_arrays",
    "get_integrator",
    "loss",
    "models",
    "plot_fit",
    "ratio_with_uncertainty",
    "reading_uncertainty",
    "truncated_normal",
    "uniform",
    "uniform_stats",
]
