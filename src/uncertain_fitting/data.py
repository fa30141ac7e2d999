from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class DataEntry:
    """One noisy observation.

    ``uncertainty`` is the standard deviation of y; ``x_uncertainty`` that of x.
    """

    x: float
    y: float
    uncertainty: float = 1.0
    x_uncertainty: float = 0.0

    def __post_init__(self) -> None:
        for name in ("x", "y", "uncertainty", "x_uncertainty"):
            object.__setattr__(self, name, float(getattr(self, name)))
        if self.uncertainty < 0.0 or math.isnan(self.uncertainty):
            raise ValueError(f"uncertainty must be >= 0, got {self.uncertainty!r}.")
        if self.x_uncertainty < 0.0 or math.isnan(self.x_uncertainty):
            raise ValueError(f"x_uncertainty must be >= 0, got {self.x_uncertainty!r}.")

    @staticmethod
    def coerce(obj: Any) -> "DataEntry":
        """Build an entry from a DataEntry, an (x, y) pair or an (x, y, uncertainty) triple.

        Pairs and triples may be tuples, lists or 1-D arrays (rows of a table).
        """
        if isinstance(obj, DataEntry):
            return obj
        if isinstance(obj, (tuple, list)) or (isinstance(obj, np.ndarray) and obj.ndim == 1):
            if len(obj) == 2:
                return DataEntry(obj[0], obj[1])
            if len(obj) == 3:
                return DataEntry(obj[0], obj[1], obj[2])
        raise TypeError(
            f"Cannot interpret {obj!r} as a data entry; use (x, y), (x, y, uncertainty) or DataEntry."
        )


def as_entries(dataset: Iterable[Any]) -> List[DataEntry]:
    """Normalize an iterable of entry-like records into DataEntry objects."""
    entries = [DataEntry.coerce(e) for e in dataset]
    if not entries:
        raise ValueError("Empty dataset; need at least one (x, y) entry.")
    return entries


def as_arrays(dataset: Iterable[Any]) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Return (x, y, sigma_y, sigma_x) float arrays for a dataset."""
    entries = as_entries(dataset)
    x = np.array([e.x for e in entries], dtype=float)
    y = np.array([e.y for e in entries], dtype=float)
    sy = np.array([e.uncertainty for e in entries], dtype=float)
    sx = np.array([e.x_uncertainty for e in entries], dtype=float)
    return x, y, sy, sx


def from_arrays(
    x: Any,
    y: Any,
    uncertainty: Optional[Any] = None,
    x_uncertainty: Optional[Any] = None,
) -> List[DataEntry]:
    """Build entries from column arrays; scalar uncertainties broadcast."""
    x_arr = np.asarray(x, dtype=float).reshape(-1)
    y_arr = np.asarray(y, dtype=float).reshape(-1)
    if x_arr.shape != y_arr.shape:
        raise ValueError(f"x shape {x_arr.shape} != y shape {y_arr.shape}")

    def _column(v: Optional[Any], default: float, label: str) -> np.ndarray:
        if v is None:
            return np.full(x_arr.shape, default, dtype=float)
        arr = np.asarray(v, dtype=float)
        try:
            return np.broadcast_to(arr, x_arr.shape).reshape(-1)
        except ValueError as exc:
            raise ValueError(
                f"{label} shape {arr.shape} is not broadcastable to data shape {x_arr.shape}."
            ) from exc

    sy = _column(uncertainty, 1.0, "uncertainty")
    sx = _column(x_uncertainty, 0.0, "x_uncertainty")
    return [DataEntry(x_arr[i], y_arr[i], sy[i], sx[i]) for i in range(x_arr.size)]
