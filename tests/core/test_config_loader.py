"""Tests for YAML configuration loading and strategy building."""

from __future__ import annotations

import pytest
import yaml

from pinn_loss.core.errors import ConfigurationError
from pinn_loss.core.utils import (
    get_config_value,
    get_default_strategy_config,
    load_config,
    load_strategy_config,
    merge_configs,
    save_config,
    strategy_from_config,
    validate_config,
    validate_strategy_config,
)
from pinn_loss.discretization import (
    GridTraining,
    IterTraining,
    QuadratureTraining,
    QuasiRandomTraining,
    StochasticTraining,
)


def write_yaml(path, data):
    path.write_text(yaml.safe_dump(data))
    return str(path)


def test_load_strategy_config_fills_defaults(tmp_path):
    path = write_yaml(tmp_path / "run.yaml", {
        'problem': 'poisson_2d',
        'strategy': {'type': 'quasi_random', 'sampling_method': 'sobol', 'number_of_points': 256},
        'lbfgs': {'max_iter': 20},
    })
    strategy, config = load_strategy_config(path)

    assert strategy == QuasiRandomTraining(sampling_method='sobol', number_of_points=256)
    assert config['lbfgs']['max_iter'] == 20
    assert config['network']['n_neurons'] == 16
    assert 'dx' not in config['strategy']


@pytest.mark.parametrize("section, expected", [
    ({'type': 'grid', 'dx': 0.05}, GridTraining(dx=0.05)),
    ({'type': 'iter', 'dx': 0.1, 'iterations': 50}, IterTraining(dx=0.1, iterations=50)),
    ({'type': 'stochastic', 'number_of_points': 10}, StochasticTraining(number_of_points=10)),
    ({'type': 'quadrature', 'algorithm': 'nquad'}, QuadratureTraining(algorithm='nquad')),
    ({'type': 'GridTraining'}, GridTraining()),
])
def test_strategy_from_config(section, expected):
    assert strategy_from_config({'strategy': section}) == expected


def test_unknown_strategy_type():
    with pytest.raises(ConfigurationError, match="Unknown strategy type"):
        strategy_from_config({'strategy': {'type': 'adaptive'}})
    with pytest.raises(ConfigurationError):
        strategy_from_config({'strategy': {'type': 'TrainingStrategy'}})


def test_unknown_strategy_parameter():
    with pytest.raises(ConfigurationError, match="dx"):
        validate_strategy_config({'strategy': {'type': 'stochastic', 'dx': 0.1}})


def test_rejected_strategy_value_becomes_configuration_error():
    with pytest.raises(ConfigurationError, match="StochasticTraining"):
        strategy_from_config({'strategy': {'type': 'stochastic', 'number_of_points': 0}})


def test_missing_strategy_section():
    with pytest.raises(ConfigurationError, match="strategy.type"):
        strategy_from_config({'seed': 1})


def test_load_config_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))

    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    with pytest.raises(ConfigurationError, match="Empty"):
        load_config(str(empty))

    broken = tmp_path / "broken.yaml"
    broken.write_text("strategy: [unclosed")
    with pytest.raises(ConfigurationError, match="parse"):
        load_config(str(broken))

    no_strategy = write_yaml(tmp_path / "plain.yaml", {'seed': 3})
    with pytest.raises(ConfigurationError):
        load_config(no_strategy)
    assert load_config(no_strategy, validate=False) == {'seed': 3}


def test_validate_config_nested_fields():
    config = {'strategy': {'type': 'grid'}, 'lbfgs': {'max_iter': 5}}
    validate_config(config, ['strategy.type', 'lbfgs.max_iter'])
    with pytest.raises(ConfigurationError, match="network.n_neurons"):
        validate_config(config, ['network.n_neurons'])


def test_get_config_value_and_merge():
    config = {'strategy': {'type': 'grid', 'dx': 0.05}}
    assert get_config_value(config, 'strategy.dx') == 0.05
    assert get_config_value(config, 'lbfgs.max_iter', default=500) == 500

    merged = merge_configs(get_default_strategy_config(), {'strategy': {'dx': 0.05}})
    assert merged['strategy'] == {'type': 'grid', 'dx': 0.05}
    assert merged['lbfgs']['max_iter'] == 500


def test_save_config_round_trip(tmp_path):
    path = str(tmp_path / "out" / "config.yaml")
    config = get_default_strategy_config()
    save_config(config, path)
    assert load_config(path) == config

    with pytest.raises(FileExistsError):
        save_config(config, path)
    save_config({'strategy': {'type': 'stochastic'}}, path, overwrite=True)
    assert load_config(path)['strategy']['type'] == 'stochastic'


def test_iter_cursor_is_not_configurable():
    with pytest.raises(ConfigurationError, match="cursor"):
        validate_strategy_config({'strategy': {'type': 'iter', 'iterations': 10, 'cursor': 3.0}})
