"""Tests for the GaussianHMM estimator interface."""

import numpy as np
import pytest

from regimehmm import FitResult, GaussianHMM, InvalidParameter
from regimehmm.sampling import sample


@pytest.fixture
def fitted(regime_returns):
    return GaussianHMM(n_states=2, tol=1e-6, max_iter=300).fit(regime_returns)


def test_fit_returns_self(regime_returns):
    model = GaussianHMM(n_states=2, tol=1e-6, max_iter=100)
    assert model.fit(regime_returns) is model
    assert isinstance(model.result_, FitResult)
    assert model.params_ is model.result_.params


def test_fitted_attributes(fitted):
    assert fitted.startprob_.shape == (2,)
    assert fitted.transmat_.shape == (2, 2)
    assert fitted.means_.shape == (2,)
    assert np.all(fitted.variances_ > 0)
    assert isinstance(fitted.converged_, bool)


def test_predict_and_predict_proba(fitted, regime_returns):
    path = fitted.predict(regime_returns)
    proba = fitted.predict_proba(regime_returns)
    assert path.shape == (400,)
    assert proba.shape == (400, 2)
    np.testing.assert_allclose(proba.sum(axis=1), 1.0, atol=1e-6)


def test_score_matches_result(fitted, regime_returns):
    assert fitted.score(regime_returns) == pytest.approx(fitted.result_.log_likelihood)


def test_sample_from_fitted(fitted):
    states, obs = fitted.sample(25, rng=np.random.default_rng(0))
    assert states.shape == (25,)
    assert obs.shape == (25,)


@pytest.mark.parametrize("method", ["predict", "predict_proba", "score"])
def test_not_fitted(method, regime_returns):
    model = GaussianHMM(n_states=2, tol=1e-6, max_iter=10)
    with pytest.raises(ValueError, match="not fitted"):
        getattr(model, method)(regime_returns)


def test_sample_not_fitted():
    with pytest.raises(ValueError, match="not fitted"):
        GaussianHMM(n_states=2, tol=1e-6, max_iter=10).sample(5)


def test_invalid_construction():
    with pytest.raises(InvalidParameter):
        GaussianHMM(n_states=1, tol=1e-6, max_iter=10)
    with pytest.raises(InvalidParameter):
        GaussianHMM(n_states=2, tol=-1.0, max_iter=10)


@pytest.mark.parametrize("n_init", [0, -2, 1.5, True, "3"])
def test_invalid_n_init(n_init):
    with pytest.raises(InvalidParameter, match="n_init"):
        GaussianHMM(n_states=2, tol=1e-6, max_iter=10, n_init=n_init)


def test_multiple_inits(two_state_params, rng):
    _, obs = sample(two_state_params, 300, rng)
    single = GaussianHMM(n_states=2, tol=1e-6, max_iter=200).fit(obs)
    multi = GaussianHMM(n_states=2, tol=1e-6, max_iter=200, n_init=3).fit(obs)
    assert multi.score(obs) >= single.score(obs) - 1e-9


def test_repr():
    assert "n_states=2" in repr(GaussianHMM(n_states=2, tol=1e-6, max_iter=10))
