import unittest

import numpy as np
import pytest

from dsge_regimes.OtherPriors import root_invgamma
from dsge_regimes.Prior import (BAD_LOG_PRIOR,
                                Prior,
                                build_prior,
                                construct_prior,
                                prior_spec,
                                prior_type,
                                rescale_prior)


class TestRootInvGamma(unittest.TestCase):
    def setUp(self):
        self.dist = root_invgamma
        self.s = 1.0
        self.nu = 2

    def test_pdf(self):
        self.assertAlmostEqual(self.dist.pdf(1.0, self.s, self.nu), 0.7357588823428847, places=5)

    def test_logpdf(self):
        self.assertAlmostEqual(self.dist.logpdf(1.0, self.s, self.nu), -0.3068528194400547, places=5)

    def test_cdf(self):
        self.assertAlmostEqual(self.dist.cdf(1.0, self.s, self.nu), 0.36787944117144245, places=5)

    def test_ppf(self):
        self.assertAlmostEqual(self.dist.ppf(0.5, self.s, self.nu), 1.2011224087864496, places=5)
        for q in [0.05, 0.25, 0.9]:
            x = self.dist.ppf(q, 0.1, 4)
            self.assertAlmostEqual(self.dist.cdf(x, 0.1, 4), q, places=6)

    def test_mean(self):
        self.assertAlmostEqual(self.dist.mean(0.1, 2), 0.1 * np.sqrt(np.pi), places=6)
        self.assertAlmostEqual(self.dist.mean(1.0, 6), 1.151247, places=5)

    def test_rvs(self):
        samples = self.dist.rvs(1.0, 6, size=200000, random_state=np.random.default_rng(1234))
        self.assertTrue(np.all(samples > 0))
        self.assertAlmostEqual(samples.mean(), self.dist.mean(1.0, 6), delta=0.01)


def test_build_prior_moments():
    rho = build_prior('beta', 0.75, 0.10)
    assert rho.mean() == pytest.approx(0.75)
    assert rho.std() == pytest.approx(0.10)

    beta = build_prior('gamma', 0.25, 0.1)
    assert beta.mean() == pytest.approx(0.25)
    assert beta.std() == pytest.approx(0.1)

    lo, hi = build_prior('uniform', -1.0, 3.0).support()
    assert (lo, hi) == (-1.0, 3.0)


@pytest.mark.parametrize('spec', [
    ('beta', 1.2, 0.1),
    ('beta', 0.5, 0.6),
    ('gamma', -1.0, 0.1),
    ('normal', 0.0, 0.0),
    ('inv_gamma', 0.1, 0.0),
    ('uniform', 1.0, 1.0),
    ('cauchy', 0.0, 1.0),
])
def test_build_prior_rejects(spec):
    with pytest.raises(ValueError):
        build_prior(*spec)


@pytest.mark.parametrize('spec', [
    ('beta', 0.75, 0.10),
    ('gamma', 0.25, 0.1),
    ('normal', 1.5, 0.25),
    ('inv_gamma', 0.10, 2.0),
    ('uniform', 0.0, 2.0),
])
def test_prior_spec(spec):
    ptype, p1, p2 = prior_spec(build_prior(*spec))
    assert ptype == spec[0]
    assert (p1, p2) == pytest.approx(spec[1:])


def test_rescale_prior():
    psi1 = build_prior('normal', 1.5, 0.25)
    assert prior_spec(rescale_prior(psi1, 2.0, 2.0))[1:] == pytest.approx((3.0, 0.5))
    assert prior_spec(psi1)[1:] == pytest.approx((1.5, 0.25))

    sigma_g = build_prior('inv_gamma', 0.10, 2)
    recentred = rescale_prior(sigma_g, location=10.0)
    assert recentred is not sigma_g
    assert prior_spec(recentred)[1:] == pytest.approx((1.0, 2.0))
    assert prior_spec(sigma_g)[1:] == pytest.approx((0.10, 2.0))

    flat = rescale_prior(build_prior('uniform', 0.0, 2.0), location=2.0)
    assert prior_spec(flat)[1:] == pytest.approx((0.0, 4.0))


def test_rescale_prior_rejects():
    with pytest.raises(ValueError):
        rescale_prior(build_prior('beta', 0.75, 0.10), location=2.0)
    with pytest.raises(ValueError):
        rescale_prior(build_prior('inv_gamma', 0.10, 2), spread=2.0)


def test_prior_type():
    assert prior_type(build_prior('inv_gamma', 0.1, 2)) == 'inv_gamma'
    with pytest.raises(ValueError):
        prior_type(object())


class TestPrior(unittest.TestCase):

    def setUp(self):
        prior_list = {'psi1': ['normal', 1.5, 0.25],
                      'rho': ['beta', 0.75, 0.10],
                      'sigma_g': ['inv_gamma', 0.10, 2]}
        self.names = ['psi1', 'rho', 'sigma_g']
        self.prior = Prior(construct_prior(prior_list, self.names), names=self.names)

    def test_logpdf(self):
        x = np.array([1.5, 0.75, 0.2])
        expected = sum(d.logpdf(v) for d, v in zip(self.prior.priors, x))
        self.assertAlmostEqual(self.prior.logpdf(x), expected)

    def test_outside_support(self):
        self.assertEqual(self.prior.logpdf([1.5, 1.5, 0.2]), BAD_LOG_PRIOR)

    def test_wrong_length(self):
        with self.assertRaises(ValueError):
            self.prior.logpdf([1.5, 0.75])

    def test_rvs(self):
        draw = self.prior.rvs(random_state=123)
        self.assertEqual(draw.shape, (3,))
        draws = self.prior.rvs(size=5, random_state=np.random.default_rng(456))
        self.assertEqual(draws.shape, (5, 3))
        np.testing.assert_array_equal(self.prior.rvs(random_state=123), draw)
        with self.assertRaises(TypeError):
            self.prior.rvs(size=2.5)

    def test_empty(self):
        self.assertIsNone(Prior(None).logpdf([]))
        self.assertEqual(len(Prior(None)), 0)
