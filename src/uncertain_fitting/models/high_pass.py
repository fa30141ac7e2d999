from __future__ import annotations

import numpy as np

from ..model import Model


# --- first-order RC high-pass filter ----------------------------------------


def high_pass_filter_func(w, rc):
    """Gain of an RC high-pass filter: alpha = w*rc / sqrt(1 + (w*rc)^2).

    w is the angular frequency [rad/s], rc the time constant [s].
    """
    wrc = w * rc
    return wrc / np.sqrt(1.0 + wrc**2)


def high_pass_filter(*, name: str = "high-pass filter") -> Model:
    """Return the RC high-pass gain Model.

    Parameters in the model
    -----------------------
    rc : time constant R*C

    d alpha / d rc = w / (1 + (w*rc)^2)^(3/2)
    """

    def grad(w, rc):
        return (w / (1.0 + (w * rc) ** 2) ** 1.5,)

    return Model.from_function(high_pass_filter_func, name=name, grad=grad)


def rc_from_gain(w, gain, *, rtol: float = 1e-9) -> float:
    """Closed-form RC estimate from measured gains.

    Linearises alpha -> beta = alpha / sqrt(1 - alpha^2) = w*rc and fits a line
    through the origin: rc = sum(w*beta) / sum(w^2). Gains equal to 1 carry no
    information about rc and are dropped.
    """
    w = np.asarray(w, dtype=float).reshape(-1)
    a = np.abs(np.asarray(gain, dtype=float).reshape(-1))
    if w.shape != a.shape:
        raise ValueError(f"w shape {w.shape} != gain shape {a.shape}.")

    keep = ~np.isclose(a, 1.0, rtol=rtol, atol=0.0)
    if np.any(a[keep] > 1.0):
        raise ValueError("High-pass gain must be <= 1.")
    if not np.any(keep):
        raise ValueError("No gains below 1 to estimate rc from.")

    w = w[keep]
    beta = a[keep] / np.sqrt(1.0 - a[keep] ** 2)
    return float(np.sum(w * beta) / np.sum(w**2))
