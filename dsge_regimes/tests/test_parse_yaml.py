import io
import os
import unittest

import numpy as np
import pandas as pd
import pytest
import yaml

from dsge_regimes.exceptions import OutOfBounds, ValidationError
from dsge_regimes.parse_yaml import load_schema, read_yaml, to_dict, write_yaml
from dsge_regimes.Prior import prior_spec

M1010 = os.path.join(os.path.dirname(__file__), '..', 'examples', 'm1010', 'm1010.yaml')

SIMPLE = """
declarations:
  name: simple
parameters:
  sigma_g:
    value: 2.5230
    bounds: [1.0e-8, 5.0]
    transform: exponential
    prior: [inv_gamma, 0.10, 2]
  psi1:
    value: 1.3679
    prior: [normal, 1.5, 0.25]
regimes:
  dates:
    1: 1959-07-01
    2: 2020-03-31
    3: 2020-06-30
    4: 2020-09-30
  model2para_regime:
    sigma_g: {1: 1, 2: 2, 3: 2, 4: 1}
  overrides:
    sigma_g:
      2: {value: 25.23, bounds: [1.0e-8, 100.0], prior: [inv_gamma, 1.0, 2]}
"""


class TestExampleModel(unittest.TestCase):

    def setUp(self):
        self.m = read_yaml(M1010)

    def test_declarations(self):
        self.assertEqual(self.m.name, 'm1010')
        self.assertEqual(self.m.subspec, 'ss_covid')
        self.assertEqual(self.m.n_regimes(), 4)
        self.assertEqual(self.m.active_regime, 1)
        self.assertEqual(self.m.get_setting('n_anticipated_shocks'), 4)

    def test_parameters(self):
        self.assertEqual(self.m['sigma_g'].value, 2.5230)
        self.assertEqual(self.m['rho'].transform.name, 'square_root')
        self.assertTrue(self.m['pi_star'].fixed)
        self.assertEqual(self.m['beta'].scaling_expr, '1/(1 + x/100)')
        self.assertEqual(self.m['sigma_r_m3'].value, 0.2)

    def test_covid_regimes(self):
        with self.m.in_regime(2):
            self.assertAlmostEqual(self.m['sigma_g'].value, 25.23)
            self.assertEqual(self.m['sigma_g'].bounds, (1e-8, 100.0))
            self.assertAlmostEqual(prior_spec(self.m['sigma_mu'].prior)[1], 1.0)
            self.assertAlmostEqual(prior_spec(self.m['sigma_z'].prior)[1], 0.10)
        self.assertAlmostEqual(prior_spec(self.m['sigma_mu'].prior)[1], 0.10)

    def test_steady_state(self):
        ss = self.m.steady_state()
        self.assertAlmostEqual(ss['z_star'], np.log(1.003673))
        rstar = np.exp(0.8719 * np.log(1.003673)) * 1.001402
        self.assertAlmostEqual(ss['rstar'], rstar)
        self.assertAlmostEqual(ss['Rstarn'], 100 * (rstar * 1.005 - 1))

    def test_round_trip(self):
        text = write_yaml(self.m)
        m2 = read_yaml(io.StringIO(text))
        for field in ['value', 'fixed', 'bounds']:
            pd.testing.assert_frame_equal(m2.parameter_table(field), self.m.parameter_table(field))
        d1, d2 = to_dict(self.m), to_dict(m2)
        self.assertEqual(d2['regimes']['dates'], d1['regimes']['dates'])
        self.assertEqual(d2['regimes']['model2para_regime'], d1['regimes']['model2para_regime'])
        self.assertEqual(d2['auxiliary_parameters'].keys(), d1['auxiliary_parameters'].keys())
        self.assertEqual(d2['settings'], d1['settings'])
        for key in self.m.parameter_names:
            for r in self.m.parameter_regimes(key):
                p1, p2 = self.m.resolve(key, r).prior, m2.resolve(key, r).prior
                self.assertEqual(prior_spec(p1)[0], prior_spec(p2)[0])
                np.testing.assert_allclose(prior_spec(p1)[1:], prior_spec(p2)[1:])


def test_simple_model():
    m = read_yaml(io.StringIO(SIMPLE))
    assert m.subspec == 'ss0'
    assert m['psi1'].bounds == (-np.inf, np.inf)
    assert m['psi1'].transform.name == 'untransformed'
    assert [m.toggle_regime(r)['sigma_g'].value for r in range(1, 5)] == [2.5230, 25.23, 25.23, 2.5230]


def test_to_dict_structure():
    m = read_yaml(io.StringIO(SIMPLE))
    d = m.to_dict()
    assert d['declarations'] == {'name': 'simple', 'subspec': 'ss0'}
    assert d['regimes']['dates'] == {1: '1959-07-01', 2: '2020-03-31', 3: '2020-06-30', 4: '2020-09-30'}
    assert d['regimes']['model2para_regime'] == {'sigma_g': {1: 1, 2: 2, 3: 2, 4: 1}}
    overlay = d['regimes']['overrides']['sigma_g'][2]
    assert overlay['value'] == 25.23
    assert overlay['bounds'] == [1e-8, 100.0]
    assert overlay['prior'][0] == 'inv_gamma'
    assert 'regime_switching' not in d.get('settings', {})


def test_write_yaml_to_stream():
    m = read_yaml(io.StringIO(SIMPLE))
    stream = io.StringIO()
    assert write_yaml(m, stream) is None
    assert yaml.safe_load(stream.getvalue())['declarations']['name'] == 'simple'


@pytest.mark.parametrize('bad', [
    "declarations: {name: x}\nparameters: {a: {bounds: [0, 1]}}",
    "declarations: {name: x}\nparameters: {a: {value: 0.5, transform: logit}}",
    "declarations: {name: x}\nparameters: {a: {value: 0.5, prior: [cauchy, 0, 1]}}",
    "declarations: {name: x}\nparameters: {a: {value: 0.5, bounds: [0, 1, 2]}}",
    "declarations: {name: x}\nparameters: {a: {value: 0.5}}\nregimes: {dates: {0: 2020-01-01}}",
    "parameters: {a: {value: 0.5}}",
])
def test_schema_errors(bad):
    with pytest.raises(ValidationError):
        read_yaml(io.StringIO(bad))


def test_configuration_errors_propagate():
    text = SIMPLE.replace('value: 25.23, bounds: [1.0e-8, 100.0], ', 'value: 25.23, ')
    with pytest.raises(OutOfBounds):
        read_yaml(io.StringIO(text))


def test_schema_is_packaged():
    schema = load_schema('model')
    assert {'declarations', 'parameters', 'regimes'} <= set(schema)


def test_round_trip_narrowed_overlay():
    m = read_yaml(M1010)
    m.set_regime_value('sigma_g', 2, 0.5)
    m.set_regime_bounds('sigma_g', 2, (1e-8, 1.0))

    m2 = read_yaml(io.StringIO(write_yaml(m)))
    assert m2.resolve('sigma_g', 2).value == 0.5
    assert m2.resolve('sigma_g', 2).bounds == (1e-8, 1.0)
    for field in ['value', 'bounds']:
        pd.testing.assert_frame_equal(m2.parameter_table(field), m.parameter_table(field))


def test_override_value_checked_against_its_own_bounds():
    text = SIMPLE.replace('value: 25.23, bounds: [1.0e-8, 100.0]', 'value: 25.23, bounds: [1.0e-8, 20.0]')
    with pytest.raises(OutOfBounds):
        read_yaml(io.StringIO(text))
