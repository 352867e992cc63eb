from __future__ import annotations

import numpy as np


def trailing_window_stats(
    values: np.ndarray,
    window: int,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return trailing window sizes, means and sample standard deviations.

    The window at index ``i`` covers up to ``window`` values ending at ``i``;
    it is shorter at the start of the series. Standard deviation uses the
    sample (``ddof=1``) estimator and is 0 for windows holding a single value.
    """
    if window <= 0:
        raise ValueError("window must be >= 1")

    series = np.asarray(values, dtype=float)
    sizes = np.zeros(series.size, dtype=int)
    means = np.zeros(series.size, dtype=float)
    stds = np.zeros(series.size, dtype=float)
    for idx in range(series.size):
        trailing = series[max(0, idx - window + 1) : idx + 1]
        sizes[idx] = trailing.size
        means[idx] = float(trailing.mean())
        if trailing.size > 1:
            stds[idx] = float(trailing.std(ddof=1))
    return sizes, means, stds
