"""Tests for the Gaussian emission model."""

import numpy as np
import pytest

from regimehmm.emission import GaussianEmission
from regimehmm.exceptions import InvalidParameter


def test_emission_fields_are_floats():
    e = GaussianEmission(1, 2)
    assert isinstance(e.mean, float)
    assert isinstance(e.variance, float)
    assert e.std == pytest.approx(np.sqrt(2.0))


@pytest.mark.parametrize("variance", [0.0, -1.0, np.nan, np.inf])
def test_invalid_variance_raises(variance):
    with pytest.raises(InvalidParameter, match="variance"):
        GaussianEmission(0.0, variance)


@pytest.mark.parametrize("mean", [np.nan, np.inf])
def test_invalid_mean_raises(mean):
    with pytest.raises(InvalidParameter, match="mean"):
        GaussianEmission(mean, 1.0)


def test_emission_is_immutable():
    e = GaussianEmission(0.0, 1.0)
    with pytest.raises(AttributeError):
        e.mean = 1.0


def test_log_pdf_vectorized():
    e = GaussianEmission(0.0, 1.0)
    x = np.array([-1.0, 0.0, 1.0])
    out = e.log_pdf(x)
    assert out.shape == (3,)
    assert out[0] == pytest.approx(out[2])
    assert out[1] > out[0]
    np.testing.assert_allclose(e.pdf(x), np.exp(out))


def test_reestimate_unit_weights_is_sample_moments():
    obs = np.array([1.0, 2.0, 3.0, 4.0])
    new, degenerate = GaussianEmission(0.0, 1.0).reestimate(obs, np.ones(4))
    assert not degenerate
    assert new.mean == pytest.approx(2.5)
    assert new.variance == pytest.approx(np.var(obs))


def test_reestimate_weighted():
    obs = np.array([0.0, 10.0])
    new, _ = GaussianEmission(0.0, 1.0).reestimate(obs, np.array([3.0, 1.0]))
    assert new.mean == pytest.approx(2.5)
    assert new.variance == pytest.approx((3 * 2.5**2 + 7.5**2) / 4)


def test_reestimate_applies_variance_floor():
    obs = np.array([1.0, 1.0, 1.0])
    new, degenerate = GaussianEmission(0.0, 1.0).reestimate(obs, np.ones(3), variance_floor=1e-3)
    assert not degenerate
    assert new.variance == pytest.approx(1e-3)
    assert new.variance > 1e-3


def test_reestimate_zero_weight_is_degenerate():
    """A state with no responsibility keeps its previous emission."""
    e = GaussianEmission(0.3, 0.7)
    new, degenerate = e.reestimate(np.array([1.0, 2.0]), np.zeros(2))
    assert degenerate
    assert new is e
