import logging

import numpy as np
import pytest
from cruising_tools.config.params import init_params
from cruising_tools.exceptions import ConfigurationError
from cruising_tools.population import (
    curb_saving,
    cruising_cost,
    max_cruise_time,
    init_dataframe,
    SAMPLED_COLUMNS,
    DERIVED_COLUMNS
)
from cruising_tools.utils.distributions import get_scipy_bernoulli, get_scipy_poisson


def test_curb_saving():
    assert curb_saving(2, 8, 1) == 14


def test_cruising_cost_policies():
    assert cruising_cost(3, 10, 1, 0.5, "egalitarian") == pytest.approx(15.5)
    assert cruising_cost(3, 10, 1, 0.5, "dictator") == pytest.approx(5.5)
    assert cruising_cost(3, 10, 1, 0.5, "diarchy") == pytest.approx(10.5)
    assert cruising_cost(1, 10, 1, 0.5, "diarchy") == pytest.approx(5.5)


def test_cruising_cost_unknown_policy():
    with pytest.raises(ConfigurationError):
        cruising_cost(3, 10, 1, 0.5, "oligarchy")


def test_max_cruise_time_rounds_to_minutes():
    assert max_cruise_time(14, 15.5) == 54
    assert max_cruise_time(0, 5.5) == 0
    assert np.isinf(max_cruise_time(1, 0))
    assert np.isnan(max_cruise_time(0, 0))


def test_fixed_parameters():
    params = init_params(ar=1, t=0.05, c=0.5, n=3, v=10, f=1, p=1, m=8, model_time=10)
    df = init_dataframe(params, np.random.default_rng(0))

    assert list(df.columns) == SAMPLED_COLUMNS + DERIVED_COLUMNS
    assert len(df) == 10
    assert df["arrt"].tolist() == list(range(1, 11))
    # t is floored at mint
    assert np.allclose(df["t"], 0.1)
    assert np.allclose(df["tmin"], 6.0)
    assert np.allclose(df["psav"], 0.7)
    assert np.allclose(df["ccost"], 15.5)
    assert np.all(df["mct"] == 3)


def test_no_arrivals():
    df = init_dataframe(init_params(ar=0, model_time=30), np.random.default_rng(0))
    assert len(df) == 0
    assert list(df.columns) == SAMPLED_COLUMNS + DERIVED_COLUMNS


def test_random_arrivals_ordered():
    params = init_params(ar=get_scipy_bernoulli(0.3), model_time=200)
    df = init_dataframe(params, np.random.default_rng(3))

    arrt = df["arrt"].to_numpy()
    assert 0 < len(df) < 200
    assert np.all(np.diff(arrt) > 0)
    assert arrt.min() >= 1 and arrt.max() <= 200


def test_floors_applied():
    params = init_params(minc=0.4, minv=50, mint=0.5, model_time=300)
    df = init_dataframe(params, np.random.default_rng(11))
    assert np.all(df["t"] >= 0.5)
    assert np.all(df["c"] >= 0.4)
    assert np.all(df["v"] >= 50)


def test_same_seed_same_population():
    params = init_params(model_time=120)
    a = init_dataframe(params, np.random.default_rng(5))
    b = init_dataframe(params, np.random.default_rng(5))
    assert a.equals(b)


def test_multiple_arrivals_warn(caplog):
    params = init_params(ar=get_scipy_poisson(3), model_time=50)
    with caplog.at_level(logging.WARNING):
        df = init_dataframe(params, np.random.default_rng(0))
    assert "more than one arrival" in caplog.text
    assert len(df) <= 50
