"""Tests for Baum-Welch re-estimation."""

import logging

import numpy as np
import pytest

from regimehmm import (
    FitConfig,
    InsufficientData,
    InvalidParameter,
    IterationInfo,
    ParameterSet,
    quantile_initial_guess,
)
from regimehmm.baum_welch import baum_welch, m_step
from regimehmm.forward_backward import forward_backward
from regimehmm.sampling import sample


@pytest.fixture
def config():
    return FitConfig(tolerance=1e-8, max_iterations=200)


def test_log_likelihood_non_decreasing(three_state_params, config, rng):
    _, obs = sample(three_state_params, 400, rng)
    guess = quantile_initial_guess(obs, 3)
    em = baum_welch(obs, guess, config)
    diffs = np.diff(em.log_likelihoods)
    assert np.all(diffs >= -1e-8)
    assert len(em.log_likelihoods) == em.n_iter + 1


def test_probabilities_stay_normalized(two_state_params, config, rng):
    """pi and every row of A sum to 1 before and after each iteration."""
    _, obs = sample(two_state_params, 200, rng)
    seen = []

    def callback(info: IterationInfo) -> None:
        seen.append(info.params)

    guess = quantile_initial_guess(obs, 2)
    seen.append(guess)
    baum_welch(obs, guess, config, callback=callback)

    assert len(seen) > 1
    for params in seen:
        assert params.start_prob.sum() == pytest.approx(1.0, abs=1e-6)
        np.testing.assert_allclose(params.trans_mat.sum(axis=1), 1.0, atol=1e-6)


def test_initial_guess_not_modified(two_state_params, config, rng):
    _, obs = sample(two_state_params, 100, rng)
    guess = quantile_initial_guess(obs, 2)
    snapshot = ParameterSet(guess.start_prob.copy(), guess.trans_mat.copy(), guess.emissions)
    em = baum_welch(obs, guess, config)
    assert em.params is not guess
    assert guess.allclose(snapshot, atol=0.0)


def test_deterministic(two_state_params, config, rng):
    _, obs = sample(two_state_params, 150, rng)
    guess = quantile_initial_guess(obs, 2)
    a = baum_welch(obs, guess, config)
    b = baum_welch(obs, guess, config)
    assert a.params.allclose(b.params, atol=0.0)
    assert a.log_likelihoods == b.log_likelihoods


def test_m_step_single_iteration_formulas(two_state_params):
    """One M-step reproduces the closed-form updates."""
    obs = np.array([-1.2, -0.8, 0.9, 1.3, 1.1, -0.7])
    fb = forward_backward(obs, two_state_params)
    config = FitConfig(tolerance=0.0, max_iterations=1)
    new, degenerate = m_step(obs, two_state_params, fb, config)

    assert degenerate == []
    np.testing.assert_allclose(new.start_prob, fb.gamma[0])
    expected_A = fb.xi.sum(axis=0) / fb.gamma[:-1].sum(axis=0)[:, np.newaxis]
    np.testing.assert_allclose(new.trans_mat, expected_A, atol=1e-10)
    w = fb.gamma[:, 1]
    mean = np.dot(w, obs) / w.sum()
    assert new.means[1] == pytest.approx(mean)
    assert new.variances[1] == pytest.approx(np.dot(w, (obs - mean) ** 2) / w.sum())


def test_callback_receives_each_iteration(two_state_params, rng):
    _, obs = sample(two_state_params, 100, rng)
    infos = []
    em = baum_welch(
        obs,
        quantile_initial_guess(obs, 2),
        FitConfig(tolerance=0.0, max_iterations=5),
        callback=infos.append,
    )
    assert [i.iteration for i in infos] == [1, 2, 3, 4, 5]
    assert em.n_iter == 5
    assert infos[-1].log_likelihood == pytest.approx(em.log_likelihoods[-1])


def test_max_iterations_reports_non_convergence(two_state_params, rng):
    _, obs = sample(two_state_params, 100, rng)
    em = baum_welch(obs, quantile_initial_guess(obs, 2), FitConfig(tolerance=0.0, max_iterations=3))
    assert not em.converged
    assert em.n_iter == 3
    assert em.non_convergence is not None
    assert em.non_convergence.n_iter == 3
    assert em.non_convergence.tolerance == 0.0


def test_converges_with_loose_tolerance(two_state_params, rng):
    _, obs = sample(two_state_params, 200, rng)
    em = baum_welch(obs, quantile_initial_guess(obs, 2), FitConfig(tolerance=1e-2, max_iterations=500))
    assert em.converged
    assert em.non_convergence is None
    assert em.n_iter < 500


def test_degenerate_state_keeps_emission():
    """A state far from every observation gets no mass and is left as is."""
    obs = np.array([0.1, -0.1, 0.05, 0.0, -0.05, 0.1, 0.02, -0.03])
    guess = ParameterSet.from_arrays(
        [1.0 - 1e-12, 1e-12],
        [[1.0 - 1e-12, 1e-12], [0.5, 0.5]],
        [0.0, 1e6],
        [0.01, 1e-4],
    )
    em = baum_welch(obs, guess, FitConfig(tolerance=1e-10, max_iterations=10))

    assert len(em.degenerate_states) == 1
    diag = em.degenerate_states[0]
    assert diag.state == 1
    assert diag.iteration == 1
    assert em.params.means[1] == 1e6
    assert em.params.variances[1] == 1e-4
    assert np.all(np.isfinite(em.params.trans_mat))


def test_degenerate_state_logged(caplog):
    obs = np.array([0.1, -0.1, 0.05, 0.0])
    guess = ParameterSet.from_arrays([0.5, 0.5], [[0.5, 0.5], [0.5, 0.5]], [0.0, 1e6], [0.01, 1e-4])
    from regimehmm.baum_welch import logger

    logger.addHandler(caplog.handler)
    try:
        with caplog.at_level(logging.WARNING, logger=logger.name):
            baum_welch(obs, guess, FitConfig(tolerance=1e-10, max_iterations=3))
    finally:
        logger.removeHandler(caplog.handler)
    assert any("degenerate" in r.getMessage() for r in caplog.records)


def test_too_short_sequence(two_state_params, config):
    with pytest.raises(InsufficientData):
        baum_welch(np.array([0.5]), two_state_params, config)


def test_fewer_observations_than_states(three_state_params, config):
    with pytest.raises(InsufficientData):
        baum_welch(np.array([0.5, 0.1]), three_state_params, config)


def test_nan_rejected(two_state_params, config):
    with pytest.raises(InvalidParameter):
        baum_welch(np.array([0.5, np.nan, 0.2]), two_state_params, config)
