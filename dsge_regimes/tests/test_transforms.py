import numpy as np
import pytest

from dsge_regimes.transforms import (Exponential,
                                     SquareRoot,
                                     Untransformed,
                                     get_transform)


@pytest.mark.parametrize('transform, bounds, x', [
    (Untransformed(), (-5.0, 5.0), 0.3673),
    (SquareRoot(), (0.0, 1.0), 0.7126),
    (SquareRoot(), (-0.5, 0.5), 0.0388),
    (Exponential(), (1e-8, 5.0), 2.5230),
    (Exponential(), (1e-5, np.inf), 1.3679),
])
def test_inverse(transform, bounds, x):
    y = transform.to_real_line(x, bounds)
    assert np.isfinite(y)
    assert transform.to_model_space(y, bounds) == pytest.approx(x)


def test_square_root_midpoint():
    assert SquareRoot().to_real_line(0.5, (0.0, 1.0)) == 0.0
    assert SquareRoot().to_model_space(0.0, (0.0, 1.0)) == 0.5


def test_square_root_requires_finite_bounds():
    with pytest.raises(ValueError):
        SquareRoot().to_real_line(0.5, (0.0, np.inf))


def test_exponential_vectorized():
    y = Exponential().to_real_line(np.array([1.0, 2.0]), (0.0, np.inf))
    np.testing.assert_allclose(y, np.log([1.0, 2.0]))


def test_get_transform():
    assert get_transform(None) == Untransformed()
    assert get_transform('square_root') == SquareRoot()
    assert get_transform('Exponential') == Exponential()
    t = Exponential()
    assert get_transform(t) is t
    assert SquareRoot() != Exponential()
    with pytest.raises(ValueError):
        get_transform('logit')
