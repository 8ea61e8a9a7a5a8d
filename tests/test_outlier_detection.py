"""
Test cases for outlier detection over metric values, covering degenerate inputs,
the strict threshold comparison and the demo scenario.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import math
import warnings

import numpy as np
import pytest

from engine.outliers import find_outliers, population_stats
from run import demo_metrics


@pytest.mark.parametrize("values", [[], [42.0], [-3.5]])
def test_short_inputs_have_no_outliers(values):
    assert find_outliers(values) == []


def test_identical_values_have_no_outliers():
    assert find_outliers([0.1] * 10) == []
    assert find_outliers([7.0] * 10) == []


def test_single_spike_is_flagged():
    assert find_outliers([1.0] * 9 + [100.0]) == [9]


def test_deviation_equal_to_threshold_is_not_flagged():
    # mean 2, population std 4, spike deviation exactly 8
    assert find_outliers([0.0, 0.0, 0.0, 0.0, 10.0]) == []


def test_threshold_sigma_is_configurable():
    values = [0.0, 0.0, 0.0, 10.0]
    assert find_outliers(values) == []
    assert find_outliers(values, threshold_sigma=1.0) == [3]


def test_population_stats_uses_uncorrected_std():
    mean, std = population_stats(np.array([1.0, 2.0, 3.0, 4.0]))
    assert mean == 2.5
    assert std == pytest.approx(math.sqrt(1.25))
    assert std < float(np.std([1.0, 2.0, 3.0, 4.0], ddof=1))


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_indices_match_threshold_and_ascend(seed):
    rng = np.random.default_rng(seed)
    values = rng.normal(50.0, 5.0, 400)
    values[rng.integers(0, 400, 5)] += 60.0

    got = find_outliers(values.tolist())

    mean = values.mean()
    limit = 2 * values.std()
    expected = [i for i, v in enumerate(values) if abs(v - mean) > limit]
    assert got == expected
    assert all(0 <= i < len(values) for i in got)
    assert got == sorted(set(got))


def test_non_finite_values_yield_no_outliers_quietly():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert find_outliers([1.0, float("nan"), 3.0]) == []
        assert find_outliers([1.0, float("inf"), 3.0]) == []


def test_repeated_calls_are_identical():
    values = [m.value for m in demo_metrics(seed=11)]
    assert find_outliers(values) == find_outliers(values)


@pytest.mark.parametrize("seed", [None, 5, 1234])
def test_demo_batch_flags_injected_spikes(seed):
    values = [m.value for m in demo_metrics(seed=seed)]
    assert find_outliers(values) == [7, 113, 835]
