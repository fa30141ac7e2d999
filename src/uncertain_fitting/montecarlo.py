from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple
from warnings import warn

import numpy as np

from .data import as_arrays
from .fitting import fit, loss_weights
from .model import Model
from .optim import SgdConfig
from .util import spawn_generators, uncertainty_to_string

try:
    import uncertainties
except Exception:  # pragma: no cover - optional at import time
    uncertainties = None


__all__ = ["ParamEstimate", "MonteCarloResult", "fit_with_std_dev", "format_estimate", "perturb"]


@dataclass(frozen=True)
class ParamEstimate:
    """Monte Carlo estimate of a single parameter."""

    name: str
    value: float
    stderr: float

    @property
    def u(self):
        """Return the estimate as an uncertainties ufloat."""
        if uncertainties is None:
            raise RuntimeError("uncertainties package is not available.")
        return uncertainties.ufloat(self.value, self.stderr)

    def __getitem__(self, key: str) -> Any:
        if key == "value":
            return self.value
        if key in ("error", "stderr"):
            return self.stderr
        raise KeyError(key)


@dataclass(frozen=True)
class MonteCarloResult:
    """Per-parameter mean and standard deviation over independent refits.

    samples has shape (trials, N): row t is the vector fitted in trial t.
    """

    param_names: Tuple[str, ...]
    samples: np.ndarray
    mean: np.ndarray
    std_dev: np.ndarray

    @property
    def n_trials(self) -> int:
        return int(self.samples.shape[0])

    def __len__(self) -> int:
        return len(self.param_names)

    def __iter__(self):
        return (self[i] for i in range(len(self.param_names)))

    def __getitem__(self, key) -> ParamEstimate:
        if isinstance(key, str):
            try:
                j = self.param_names.index(key)
            except ValueError as e:
                raise KeyError(key) from e
        elif isinstance(key, (int, np.integer)):
            j = range(len(self.param_names))[int(key)]
        else:
            raise KeyError(key)
        return ParamEstimate(
            name=self.param_names[j],
            value=float(self.mean[j]),
            stderr=float(self.std_dev[j]),
        )

    def as_array(self) -> np.ndarray:
        """Return an (N, 2) array of [mean, std_dev] rows."""
        return np.column_stack([self.mean, self.std_dev])

    def as_dict(self) -> dict:
        """Return name -> (mean, std_dev)."""
        return {p.name: (p.value, p.stderr) for p in self}

    def summary(self, digits: int | str | None = "auto") -> str:
        lines = [f"Monte Carlo estimate ({self.n_trials} trials)"]
        width = max((len(n) for n in self.param_names), default=0)
        for p in self:
            lines.append(f"  {p.name:<{width}} = {format_estimate(p, digits)}")
        return "\n".join(lines)


_NEGLIGIBLE_SPREAD = 1e-10


def format_estimate(p: ParamEstimate, digits: int | str | None = "auto") -> str:
    """value(uncertainty) text, or the bare value when there is no usable spread.

    A spread below 1e-10 of |value| is rounding noise from converged refits.
    """
    if np.isfinite(p.stderr) and p.stderr > _NEGLIGIBLE_SPREAD * abs(p.value):
        return uncertainty_to_string(p.value, p.stderr, precision=digits)
    return f"{p.value:.6g} (no spread)"


def perturb(
    x: np.ndarray,
    y: np.ndarray,
    sigma_y: np.ndarray,
    sigma_x: np.ndarray,
    rng: np.random.Generator,
) -> Tuple[np.ndarray, np.ndarray]:
    """Resample one dataset: x + N(0,1)*sigma_x, y + N(0,1)*sigma_y.

    Entries with zero uncertainty come back unchanged.
    """
    z = rng.standard_normal(size=(x.size, 2))
    return x + z[:, 0] * sigma_x, y + z[:, 1] * sigma_y


def fit_with_std_dev(
    dataset: Iterable[Any],
    trials: int,
    model: Model,
    iterations: int,
    config: Optional[SgdConfig] = None,
    *,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    workers: Optional[int] = None,
    ddof: int = 1,
    weighting: str = "none",
) -> MonteCarloResult:
    """Estimate parameter uncertainties by perturb-and-refit Monte Carlo.

    Each trial owns an independent random stream. It draws its starting
    parameters from a standard normal, resamples every entry within its
    reported uncertainties (see :func:`perturb`) and refits with
    :func:`~uncertain_fitting.fitting.fit`. The trial vectors are then reduced
    to a per-parameter mean and standard deviation.

    Parameters
    ----------
    trials:
        Number of independent refits (>= 1).
    seed, rng:
        Source of the per-trial streams; results are reproducible for a fixed
        seed regardless of ``workers``.
    workers:
        None or 1 runs trials in order; more runs them on a thread pool.
    ddof:
        Delta degrees of freedom of the standard deviation (1: sample std).
    weighting:
        Loss weighting for each refit; uncertainties always scale the noise.

    Raises
    ------
    OptimizerError
        If any trial's fit fails; no partial estimate is returned.
    """
    trials = int(trials)
    if trials < 1:
        raise ValueError(f"trials must be >= 1, got {trials}.")
    if config is None:
        config = SgdConfig()

    n_workers = 1 if workers is None else int(workers)
    if n_workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers!r}.")

    x, y, sy, sx = as_arrays(dataset)
    loss_weights(sy, weighting)

    n = model.n_params
    generators = spawn_generators(trials, seed=seed, rng=rng)
    samples = np.empty((trials, n), dtype=float)

    def _one_trial(t: int) -> None:
        g = generators[t]
        initial = g.standard_normal(size=n)
        xt, yt = perturb(x, y, sy, sx, g)
        # Keep per-entry uncertainties so weighted refits see the same weights.
        entries = [(xt[i], yt[i], sy[i]) for i in range(xt.size)]
        samples[t] = fit(entries, model, iterations, config, initial, weighting=weighting)

    if n_workers == 1 or trials == 1:
        for t in range(trials):
            _one_trial(t)
    else:
        with ThreadPoolExecutor(max_workers=n_workers) as ex:
            futures = [ex.submit(_one_trial, t) for t in range(trials)]
            _, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for f in pending:
                f.cancel()
            for f in futures:
                if f.done() and not f.cancelled() and f.exception() is not None:
                    raise f.exception()

    if trials <= ddof:
        warn(
            f"{trials} trial(s) with ddof={ddof} cannot estimate a spread; "
            "std_dev is nan. Use more trials.",
            UserWarning,
            stacklevel=2,
        )
        std = np.full((n,), np.nan)
    else:
        std = np.std(samples, axis=0, ddof=ddof)

    return MonteCarloResult(
        param_names=tuple(model.param_names),
        samples=samples,
        mean=np.mean(samples, axis=0),
        std_dev=std,
    )
