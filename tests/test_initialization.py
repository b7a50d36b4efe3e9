"""Tests for initial parameter guesses."""

import numpy as np
import pytest

from regimehmm import InsufficientData, InvalidParameter
from regimehmm.initialization import quantile_initial_guess, random_initial_guess


def test_quantile_guess_orders_means(regime_returns):
    guess = quantile_initial_guess(regime_returns, 3)
    assert guess.n_states == 3
    assert np.all(np.diff(guess.means) > 0)
    np.testing.assert_allclose(guess.start_prob, 1.0 / 3)
    np.testing.assert_allclose(np.diag(guess.trans_mat), 0.9)
    np.testing.assert_allclose(guess.trans_mat.sum(axis=1), 1.0)


def test_quantile_guess_chunk_moments():
    obs = np.array([4.0, 1.0, 3.0, 2.0])
    guess = quantile_initial_guess(obs, 2, self_transition=0.5)
    np.testing.assert_allclose(guess.means, [1.5, 3.5])
    np.testing.assert_allclose(guess.variances, [0.25, 0.25])
    np.testing.assert_allclose(guess.trans_mat, [[0.5, 0.5], [0.5, 0.5]])


def test_quantile_guess_floors_constant_chunks():
    obs = np.array([1.0, 1.0, 1.0, 5.0, 5.0, 5.0])
    guess = quantile_initial_guess(obs, 2, variance_floor=1e-4)
    np.testing.assert_allclose(guess.variances, [1e-4, 1e-4])


def test_quantile_guess_is_deterministic(regime_returns):
    a = quantile_initial_guess(regime_returns, 2)
    b = quantile_initial_guess(regime_returns, 2)
    assert a.allclose(b, atol=0.0)


def test_quantile_guess_invalid_self_transition(regime_returns):
    with pytest.raises(InvalidParameter, match="self_transition"):
        quantile_initial_guess(regime_returns, 2, self_transition=1.5)


def test_quantile_guess_too_short():
    with pytest.raises(InsufficientData):
        quantile_initial_guess(np.array([0.1, 0.2]), 3)


def test_random_guess_is_valid(regime_returns, rng):
    guess = random_initial_guess(regime_returns, 3, rng)
    assert guess.n_states == 3
    assert np.all(np.diff(guess.means) > 0)
    assert np.all(np.isin(guess.means, regime_returns))
    np.testing.assert_allclose(guess.variances, np.var(regime_returns))
    np.testing.assert_allclose(guess.trans_mat.sum(axis=1), 1.0, atol=1e-12)


def test_random_guess_seeded(regime_returns):
    a = random_initial_guess(regime_returns, 2, np.random.default_rng(5))
    b = random_initial_guess(regime_returns, 2, np.random.default_rng(5))
    c = random_initial_guess(regime_returns, 2, np.random.default_rng(6))
    assert a.allclose(b, atol=0.0)
    assert not a.allclose(c, atol=0.0)


def test_random_guess_invalid_num_states(regime_returns):
    with pytest.raises(InvalidParameter):
        random_initial_guess(regime_returns, 1)
