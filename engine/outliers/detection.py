"""
Outlier detection over an ordered sequence of metric values: flags the
positions whose absolute deviation from the mean exceeds a fixed multiple of
the population standard deviation of the whole sequence.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from config import DEFAULT_THRESHOLD_SIGMA


def population_stats(arr: np.ndarray) -> Tuple[float, float]:
    # ddof=0: population standard deviation, not Bessel corrected
    return float(arr.mean()), float(arr.std(ddof=0))


def find_outliers(
    values: Sequence[float],
    threshold_sigma: float = DEFAULT_THRESHOLD_SIGMA,
) -> List[int]:
    """Return the ascending indices ``i`` with ``|values[i] - mean| > threshold_sigma * std``.

    Comparison is strict and exact, so a single value or a constant sequence
    yields no outliers. Non-finite inputs make every comparison false.
    """
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        return []

    with np.errstate(invalid="ignore", over="ignore"):
        mean, std = population_stats(arr)
        flags = np.abs(arr - mean) > threshold_sigma * std
    return [int(i) for i in np.flatnonzero(flags)]
