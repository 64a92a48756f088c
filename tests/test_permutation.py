# tests/test_permutation.py

import numpy as np
import pandas as pd
import pytest

from flight_charts.errors import InsufficientSampleError
from flight_charts.permutation import observed_statistic, run


@pytest.fixture
def records():
    rng = np.random.RandomState(11)
    n = 400
    airline = np.where(rng.uniform(size=n) < 0.3, "WN", "AA")
    # WN gets a noticeably higher delay rate
    rate = np.where(airline == "WN", 0.6, 0.3)
    return pd.DataFrame({"AIRLINE": airline, "CD": rng.uniform(size=n) < rate})


def is_wn(df):
    return df["AIRLINE"] == "WN"


def test_observed_statistic(records):
    expected = records.loc[records["AIRLINE"] == "WN", "CD"].mean()
    assert observed_statistic(records, is_wn, "CD") == pytest.approx(expected)


def test_same_seed_same_result(records):
    a = run(records, is_wn, "CD", 200, random_state=42)
    b = run(records, is_wn, "CD", 200, random_state=42)
    assert a.p_value == b.p_value
    assert np.array_equal(a.null_distribution, b.null_distribution)


def test_accepts_random_state_instance(records):
    a = run(records, is_wn, "CD", 50, random_state=np.random.RandomState(5))
    b = run(records, is_wn, "CD", 50, random_state=5)
    assert np.array_equal(a.null_distribution, b.null_distribution)


def test_result_shape_and_range(records):
    result = run(records, is_wn, "CD", 150, random_state=0)
    assert result.num_simulations == 150
    assert 0.0 <= result.p_value <= 1.0
    assert ((result.null_distribution >= 0) & (result.null_distribution <= 1)).all()


def test_clear_difference_is_rejected(records):
    result = run(records, is_wn, "CD", 300, alpha=0.01, random_state=1)
    assert result.p_value < 0.01
    assert result.reject


def test_p_value_counts_ties():
    """If every label is true, each shuffle reproduces the observed rate exactly."""
    df = pd.DataFrame({"AIRLINE": ["WN"] * 4, "CD": [True, False, True, True]})
    result = run(df, is_wn, "CD", 20, random_state=0)
    assert np.allclose(result.null_distribution, 0.75)
    assert result.p_value == 1.0
    assert not result.reject


def test_shuffle_preserves_label_count(records):
    """Each simulated rate is k / n_true for an integer k, so labels kept their count."""
    n_true = int(is_wn(records).sum())
    n_outcome = int(records["CD"].sum())
    result = run(records, is_wn, "CD", 100, random_state=3)
    hits = result.null_distribution * n_true
    assert np.allclose(hits, np.round(hits))
    assert (hits <= min(n_true, n_outcome) + 1e-9).all()


def test_input_labels_untouched(records):
    before = records.copy()
    run(records, is_wn, "CD", 25, random_state=0)
    pd.testing.assert_frame_equal(records, before)


def test_observed_can_be_passed_in(records):
    result = run(records, is_wn, "CD", 30, observed=1.0, random_state=0)
    assert result.observed_statistic == 1.0
    assert result.p_value == 0.0


def test_no_study_records():
    df = pd.DataFrame({"AIRLINE": ["AA", "DL"], "CD": [True, False]})
    with pytest.raises(InsufficientSampleError):
        run(df, is_wn, "CD", 10)
    with pytest.raises(InsufficientSampleError):
        observed_statistic(df, is_wn, "CD")


def test_needs_at_least_one_simulation(records):
    with pytest.raises(ValueError):
        run(records, is_wn, "CD", 0)


def test_one_label_copy_reshuffled_every_trial(records):
    """Trial j shuffles the array left by trial j - 1, not a fresh copy of the labels."""
    labels = is_wn(records).to_numpy(dtype=bool)
    outcome = records["CD"].to_numpy(dtype=bool)
    rng = np.random.RandomState(21)
    working = labels.copy()
    expected = []
    for _ in range(40):
        rng.shuffle(working)
        expected.append(np.count_nonzero(working & outcome) / labels.sum())

    result = run(records, is_wn, "CD", 40, random_state=21)
    assert np.allclose(result.null_distribution, expected)
