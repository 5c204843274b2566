import io
import logging

import pytest

from dsge_regimes import Parameter, RegimeModel, init_subspec
from dsge_regimes.logging_config import (CLI_FORMAT, PACKAGE_LOGGER, configure_logging, get_logger,
                                         level_for, verbosity_level)


@pytest.fixture
def restore_package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate


def test_get_logger_namespace():
    assert get_logger('model').name == 'dsge_regimes.model'


def test_silent_by_default():
    logger = logging.getLogger(PACKAGE_LOGGER)
    assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)


def test_configure_logging(restore_package_logger):
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    configure_logging(level=logging.DEBUG, format_str='%(name)s|%(message)s', handlers={'memory': handler})

    m = RegimeModel('m', parameters=[Parameter('sigma_g', 2.5230, bounds=(1e-8, 5.0))])
    m.set_regime_value('sigma_g', 2, 1.0)
    init_subspec(m, 'ss0')

    lines = stream.getvalue().splitlines()
    assert 'dsge_regimes.model|sigma_g[2].value = 1.0' in lines
    assert any(line.startswith('dsge_regimes.subspecs|Initialized m with subspec ss0') for line in lines)
    assert not restore_package_logger.propagate


def test_level_names():
    assert level_for('debug') == logging.DEBUG
    assert level_for(logging.WARNING) == logging.WARNING
    with pytest.raises(ValueError):
        level_for('chatty')


def test_verbosity_level():
    assert [verbosity_level(n) for n in range(4)] == [logging.WARNING, logging.INFO, logging.DEBUG, logging.DEBUG]


def test_cli_format_by_level_name(restore_package_logger):
    stream = io.StringIO()
    configure_logging(level='info', format_str=CLI_FORMAT, handlers=[logging.StreamHandler(stream)])

    m = RegimeModel('m', parameters=[Parameter('sigma_g', 2.5230, bounds=(1e-8, 5.0))])
    m.set_regime_record('sigma_g', 2, value=1.0, bounds=(1e-8, 1.0))
    init_subspec(m, 'ss0')

    lines = stream.getvalue().splitlines()
    assert lines == ['INFO    dsge_regimes.subspecs: Initialized m with subspec ss0 (1 model regime(s))']
    assert len(restore_package_logger.handlers) == 1
