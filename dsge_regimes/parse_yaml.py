#!/usr/bin/env python3
"""
YAML model files for regime-indexed parameter sets.

A model file has the sections ``declarations``, ``parameters``,
``auxiliary_parameters``, ``regimes`` and ``settings``:

    declarations:
      name: m1010
      subspec: ss_covid
    parameters:
      sigma_g:
        value: 2.5230
        bounds: [1.0e-8, 5.0]
        transform: exponential
        prior: [inv_gamma, 0.10, 2]
    regimes:
      dates: {1: 1959-07-01, 2: 2020-03-31}
      model2para_regime:
        sigma_g: {1: 1, 2: 2}
      overrides:
        sigma_g:
          2: {value: 25.23, bounds: [1.0e-8, 100.0]}

The declared subspec is applied first; the ``regimes`` section then refines
it, so a file written by `write_yaml` reads back to the same model.
"""

import yaml

from importlib.resources import files as ir_files
from typing import Dict, IO, Optional, Union

import numpy as np
from cerberus import Validator

from .exceptions import ValidationError
from .parameters import Parameter
from .Prior import build_prior, prior_spec
from .RegimeModel import RegimeModel
from .subspecs import init_subspec
from .logging_config import get_logger

logger = get_logger("parser")

# maintained by set_regime_dates
DERIVED_SETTINGS = ('regime_switching', 'n_regimes')


def validate_data(data: Dict, validator) -> None:
    """
    Validates the given data against a schema defined in the validator.

    Raises:
        ValidationError: If the data fails to validate against the schema.
    """
    if not validator.validate(data):
        error_messages = '\n'.join([f'{field}: {error}' for field, error in validator.errors.items()])
        raise ValidationError(f"Validation failed: \n{error_messages}")


def load_schema(schema_name: str = 'model') -> Dict:
    """Load a schema YAML by name from the packaged dsge_regimes/schema directory."""
    schema_text = (ir_files('dsge_regimes') / 'schema' / f"{schema_name}.yaml").read_text(encoding='utf-8')
    return yaml.safe_load(schema_text)


_VALIDATOR = None


def get_validator() -> Validator:
    global _VALIDATOR
    if _VALIDATOR is None:
        _VALIDATOR = Validator(load_schema('model'))
    return _VALIDATOR


def _prior(spec):
    return None if spec is None else build_prior(*spec)


def apply_overrides(model: RegimeModel, overrides: Dict):
    """Write overlays from a ``{key: {regime: {field: value}}}`` mapping (bounds, value, fixed, prior)."""
    for key, regimes in overrides.items():
        for r, fields in regimes.items():
            if 'value' in fields or 'bounds' in fields:
                model.set_regime_record(key, r, value=fields.get('value'), bounds=fields.get('bounds'))
            if 'fixed' in fields:
                model.set_regime_fixed(key, r, fields['fixed'])
            if 'prior' in fields:
                model.set_regime_prior(key, r, _prior(fields['prior']))


def from_dict(yaml_dict: Dict) -> RegimeModel:
    """Build a `RegimeModel` from an already validated model dictionary."""
    declarations = yaml_dict['declarations']

    parameters = []
    for key, p in yaml_dict['parameters'].items():
        parameters.append(Parameter(key, p['value'],
                                    bounds=p.get('bounds', (-np.inf, np.inf)),
                                    transform=p.get('transform'),
                                    prior=_prior(p.get('prior')),
                                    fixed=p.get('fixed', False),
                                    description=p.get('description', ''),
                                    tex_label=p.get('tex_label'),
                                    scaling=p.get('scaling')))

    model = RegimeModel(name=declarations['name'],
                        parameters=parameters,
                        auxiliary_parameters=yaml_dict.get('auxiliary_parameters'),
                        settings=yaml_dict.get('settings'),
                        subspec=declarations.get('subspec', 'ss0'))

    init_subspec(model)

    regimes = yaml_dict.get('regimes') or {}
    if 'dates' in regimes:
        model.set_regime_dates(regimes['dates'])
    for key, mapping in (regimes.get('model2para_regime') or {}).items():
        model.set_mapping(key, mapping)
    apply_overrides(model, regimes.get('overrides') or {})

    return model.toggle_regime(1)


def read_yaml(yaml_file: Union[str, IO[str]]) -> RegimeModel:
    """
    Read a model from a YAML file and return a configured `RegimeModel`.

    Args:
        yaml_file: Path to a YAML file or file-like object containing the model

    Returns:
        A `RegimeModel` toggled to model regime 1

    Raises:
        ValidationError: If the model schema validation fails
        RegimeError: If the regime configuration is inconsistent
    """
    if isinstance(yaml_file, str):
        logger.info(f"Reading YAML from file: {yaml_file}")
        with open(yaml_file) as f:
            txt = f.read()
    else:
        logger.info("Reading YAML from stream")
        txt = yaml_file.read()

    yaml_dict = yaml.safe_load(txt)

    try:
        logger.debug("Performing schema validation")
        validate_data(yaml_dict, get_validator())
    except ValidationError as e:
        logger.error(f"Schema validation failed: {e}")
        raise

    try:
        return from_dict(yaml_dict)
    except ValueError as e:
        logger.error(f"Model configuration failed: {e}")
        raise


def _parameter_to_dict(para: Parameter) -> Dict:
    out = {'value': para.base.value,
           'bounds': list(para.base.bounds),
           'transform': para.transform.name,
           'fixed': para.base.fixed}
    if para.base.prior is not None:
        out['prior'] = list(prior_spec(para.base.prior))
    if para.description:
        out['description'] = para.description
    if para.tex_label != para.key:
        out['tex_label'] = para.tex_label
    if para.scaling_expr is not None:
        out['scaling'] = para.scaling_expr
    return out


def _overlay_to_dict(overlay) -> Dict:
    out = {}
    if overlay.bounds is not None:
        out['bounds'] = list(overlay.bounds)
    if overlay.value is not None:
        out['value'] = overlay.value
    if overlay.fixed is not None:
        out['fixed'] = overlay.fixed
    if overlay.prior is not None:
        out['prior'] = list(prior_spec(overlay.prior))
    return out


def to_dict(model: RegimeModel) -> Dict:
    """Plain nested-dict representation of `model`, the structure `read_yaml` accepts."""
    out = {'declarations': {'name': model.name, 'subspec': model.subspec},
           'parameters': {key: _parameter_to_dict(p) for key, p in model.parameters.items()}}

    if model.auxiliary_parameters:
        out['auxiliary_parameters'] = {name: str(expr) for name, expr in model.auxiliary_parameters.items()}

    regimes = {}
    if model.n_regimes():
        regimes['dates'] = {r: d.date().isoformat() for r, d in model.regime_dates.items()}
    if len(model.model2para_regime):
        regimes['model2para_regime'] = model.model2para_regime.to_dict()
    overrides = {key: {r: _overlay_to_dict(o) for r, o in sorted(p.regimes.items()) if not o.is_empty()}
                 for key, p in model.parameters.items() if p.regimes}
    overrides = {key: v for key, v in overrides.items() if v}
    if overrides:
        regimes['overrides'] = overrides
    if regimes:
        out['regimes'] = regimes

    settings = {key: s.value for key, s in model.settings.items() if key not in DERIVED_SETTINGS}
    if settings:
        out['settings'] = settings
    return out


def write_yaml(model: RegimeModel, stream: Optional[IO[str]] = None):
    """Dump `model` as YAML to `stream`, or return the YAML text if no stream is given."""
    return yaml.safe_dump(to_dict(model), stream, sort_keys=False, default_flow_style=None)
