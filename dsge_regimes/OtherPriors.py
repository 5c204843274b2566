import numpy as np
from scipy.stats import rv_continuous
from scipy.special import gammaln, gammaincc, gammainccinv


class root_invgamma_gen(rv_continuous):
    r"""
    Root inverse gamma distribution, the usual prior for shock standard deviations.

    sigma follows a root inverse gamma (s, nu) when sigma**2 is inverse gamma
    with shape nu/2 and scale nu*s**2/2, so that

    \begin{align}
    p(\sigma|s,\nu) = \frac{2}{\Gamma(\nu/2)} \left(\frac{\nu s^2}{2}\right)^{\nu/2}
                      \sigma^{-\nu-1} e^{-\nu s^2 / (2\sigma^2)}.
    \end{align}

    `s` is the location of the distribution, the quantity rescaled when a
    prior is recentred for a high-volatility regime.
    """

    def _logpdf(self, x, s, nu):
        half_nu = nu / 2.0
        return (np.log(2.0) - gammaln(half_nu) + half_nu * np.log(half_nu * s**2)
                - (nu + 1.0) * np.log(x) - half_nu * s**2 / x**2)

    def _pdf(self, x, s, nu):
        return np.exp(self._logpdf(x, s, nu))

    def _cdf(self, x, s, nu):
        return gammaincc(nu / 2.0, nu * s**2 / (2.0 * x**2))

    def _sf(self, x, s, nu):
        return 1.0 - self._cdf(x, s, nu)

    def _ppf(self, q, s, nu):
        return np.sqrt(nu * s**2 / (2.0 * gammainccinv(nu / 2.0, q)))

    def _stats(self, s, nu):
        mean = np.where(nu > 1,
                        s * np.sqrt(nu / 2.0) * np.exp(gammaln((nu - 1.0) / 2.0) - gammaln(nu / 2.0)),
                        np.inf)
        second = np.where(nu > 2, nu * s**2 / np.where(nu > 2, nu - 2.0, 1.0), np.inf)
        var = np.where(nu > 2, second - mean**2, np.inf)
        return mean, var, None, None

    def _rvs(self, s, nu, size=None, random_state=None):
        g = random_state.standard_gamma(nu / 2.0, size=size)
        return np.sqrt(nu * s**2 / (2.0 * g))


root_invgamma = root_invgamma_gen(a=0.0, shapes='s, nu', name='root_invgamma')
